from motor.motor_asyncio import AsyncIOMotorClient

from app.core.config import get_settings

settings = get_settings()

client = AsyncIOMotorClient(settings.mongo_uri, tz_aware=True)
db = client[settings.mongo_db]

assets_collection = db["assets"]
asset_logs_collection = db["asset_logs"]
asset_field_values_collection = db["asset_field_values"]
tickets_collection = db["tickets"]
sla_policies_collection = db["sla_policies"]
profiles_collection = db["profiles"]
system_logs_collection = db["logs"]


def get_db():
    return db
