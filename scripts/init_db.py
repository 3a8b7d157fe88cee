"""Database initialization script.

Run this script to create the marketplace tables and seed the admin account.

Usage:
    python -m scripts.init_db
"""

import asyncio

from app.core.config import get_settings
from app.db.session import init_db


async def main() -> None:
    """Initialize the database."""
    settings = get_settings()
    await init_db(settings)
    print("Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(main())
