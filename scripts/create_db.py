"""
Create the payment_sessions table directly from the models.

For first runs and local development; production uses alembic:
    alembic upgrade head

Usage:
    python -m scripts.create_db
"""

import asyncio
import logging

from payhook.core.config import get_settings
from payhook.core.logging import setup_logging
from payhook.db.session import Database

logger = logging.getLogger(__name__)


async def create_db() -> None:
    settings = get_settings()
    database = Database.from_settings(settings)

    try:
        await database.create_schema()
        logger.info("Schema created")
    finally:
        await database.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(create_db())
