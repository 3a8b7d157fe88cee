"""Database reset script.

Drops the users, templates and admin_actions tables and recreates them
with the seeded admin account. All data is lost.

Usage:
    python -m scripts.reset_db
"""

import asyncio

from app.core.config import get_settings
from app.db.session import drop_all_tables, init_db


async def main() -> None:
    """Reset the database by dropping all tables and reinitializing."""
    settings = get_settings()

    print("Dropping all database tables...")
    await drop_all_tables(settings)
    print("All tables dropped successfully!")

    print("Recreating tables and seeding the admin account...")
    await init_db(settings)
    print("Database reinitialized successfully!")


if __name__ == "__main__":
    asyncio.run(main())
