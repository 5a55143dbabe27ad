import logging

from motor.motor_asyncio import AsyncIOMotorClient
from agrimart.core.config import settings

logger = logging.getLogger(__name__)


class Database:
    client: AsyncIOMotorClient = None


db = Database()


async def connect_to_mongo():
    """Connexion à MongoDB"""
    db.client = AsyncIOMotorClient(settings.MONGODB_URI)
    logger.info("✅ Connecté à MongoDB (%s)", settings.DATABASE_NAME)


async def close_mongo_connection():
    """Déconnexion de MongoDB"""
    if db.client:
        db.client.close()
        logger.info("❌ Déconnecté de MongoDB")


def get_database():
    """Base Mongo de l'application (connect_to_mongo doit avoir été appelé)"""
    if db.client is None:
        raise RuntimeError("MongoDB client is not connected; call connect_to_mongo() first")
    return db.client[settings.DATABASE_NAME]
