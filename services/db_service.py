# services/db_service.py
from pymongo import MongoClient
from pymongo.database import Database
from config.settings import settings

# One client per process; MongoClient pools connections itself
_client = None

def get_client() -> MongoClient:
    global _client
    if _client is None:
        _client = MongoClient(settings.MONGODB_URI)
    return _client

def get_db() -> Database:
    return get_client()[settings.DB_NAME]
