from motor.motor_asyncio import AsyncIOMotorClient
from store_ratings.core.config import settings

client = AsyncIOMotorClient(settings.MONGO_URL, maxPoolSize=10, minPoolSize=0)
db = client[settings.DB_NAME]

def get_db():
    return db

def close_mongo_connection():
    client.close()
