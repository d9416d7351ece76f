from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
import uuid
from datetime import datetime

from store_ratings.models.rating import Rating
from store_ratings.utils.validators import validate_address, validate_email

class Store(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    email: str
    address: str
    owner_id: str  # weak reference to a store_owner user
    created_at: datetime = Field(default_factory=datetime.utcnow)

class StoreCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str
    address: str
    owner_id: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        error = validate_email(v)
        if error:
            raise ValueError(error)
        return v

    @field_validator("address")
    @classmethod
    def check_address(cls, v):
        error = validate_address(v)
        if error:
            raise ValueError(error)
        return v

class StoreWithRating(Store):
    average_rating: float = 0
    rating_count: int = 0
    my_rating: Optional[int] = None
    address_preview: Optional[str] = None

class StoreDetail(BaseModel):
    store: Store
    ratings: List[Rating] = []
    average_rating: float = 0
    user_rating: Optional[int] = None
    user_rating_label: Optional[str] = None  # "Rated on ..." or "Updated on ..."
    can_rate: bool = False

class StoreUpdate(BaseModel):
    name: str = Field(..., min_length=1)
    email: str
    address: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        error = validate_email(v)
        if error:
            raise ValueError(error)
        return v

    @field_validator("address")
    @classmethod
    def check_address(cls, v):
        error = validate_address(v)
        if error:
            raise ValueError(error)
        return v
