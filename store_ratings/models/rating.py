from pydantic import BaseModel, Field, field_validator
from typing import Optional
import uuid
from datetime import datetime

from store_ratings.utils.validators import validate_rating

class Rating(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    store_id: str
    user_id: str
    value: int
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

class RatingSubmit(BaseModel):
    value: int

    @field_validator("value")
    @classmethod
    def check_value(cls, v):
        error = validate_rating(v)
        if error:
            raise ValueError(error)
        return v

class RaterSummary(BaseModel):
    uid: str
    name: str = "Anonymous"
    email: str = "—"
    rating_value: int
    rating_date: datetime
    rating_date_label: str = ""
