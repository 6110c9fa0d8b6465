"""
Database configuration and initialization module.
Builds the Tortoise ORM config from the datastore URL and access key, and
opens/closes the connection.
"""
import logging

from tortoise import Tortoise
from tortoise.backends.base.config_generator import expand_db_url

logger = logging.getLogger("uvicorn.error")

MODELS = ["accounts.models.user"]


def build_tortoise_config(database_url: str, database_key: str) -> dict:
    """
    Build the Tortoise ORM configuration dictionary.

    The access key is used as the password of the connection; it overrides
    any password embedded in the URL. SQLite URLs (used in tests and local
    development) carry no credentials, so the key is ignored for them.

    Args:
        database_url: e.g. postgres://user@host:5432/db or sqlite://:memory:
        database_key: Password for the database user
    """
    connection = expand_db_url(database_url)
    if not connection["engine"].endswith("sqlite"):
        connection["credentials"]["password"] = database_key

    return {
        "connections": {"default": connection},
        "apps": {
            "models": {
                "models": MODELS,
                "default_connection": "default",
            },
        },
        "use_tz": True,
        "timezone": "UTC",
    }


async def init_db(config: dict, generate_schemas: bool = False):
    """
    Initialize Tortoise ORM database connection.

    Should be called during application startup. Schema generation is off by
    default; the users table is expected to exist in the hosted database.
    """
    await Tortoise.init(config=config)
    if generate_schemas:
        logger.info("[db] generating schemas (safe mode)")
        await Tortoise.generate_schemas(safe=True)


async def close_db():
    """Close all database connections (application shutdown)."""
    await Tortoise.close_connections()
