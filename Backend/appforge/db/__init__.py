# appforge/db/__init__.py
"""
Database module.
"""
from typing import Optional

from appforge.core.config import settings

# Motor client instance
_client = None
_db = None
_connection_error: Optional[str] = None


async def connect_db():
    """
    Connect to MongoDB and initialize Beanie.

    If MongoDB is not available, stores the error for later retrieval
    rather than failing startup.
    """
    global _client, _db, _connection_error
    try:
        from motor.motor_asyncio import AsyncIOMotorClient

        _client = AsyncIOMotorClient(settings.mongodb_url, serverSelectionTimeoutMS=5000)

        try:
            _db = _client.get_default_database()
        except Exception:
            _db = _client.appforge

        # Fails fast if MongoDB is not running
        await _client.admin.command("ping")
        print("✅ [DB] Connected to MongoDB")

        from beanie import init_beanie
        from appforge.models import DOCUMENT_MODELS

        await init_beanie(database=_db, document_models=DOCUMENT_MODELS)
        print("✅ [DB] Beanie ODM Initialized")
        _connection_error = None
    except Exception as e:
        error_msg = str(e)
        print(f"⚠️ [DB] MongoDB not available: {error_msg}")
        print(f"   ℹ️ Agent turns will fail until {settings.mongodb_url} is reachable.")
        _client = None
        _db = None
        _connection_error = error_msg


async def disconnect_db():
    """Disconnect from MongoDB."""
    global _client, _db
    if _client:
        _client.close()
        _client = None
        _db = None
        print("[DB] Disconnected from MongoDB")


def is_connected() -> bool:
    return _db is not None


def get_connection_error() -> Optional[str]:
    return _connection_error
