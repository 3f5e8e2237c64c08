"""Database initialization script.

Run this script to create database tables.

Usage:
    python -m scripts.init_db
    or
    python scripts/init_db.py (after pip install -e .)
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from draftgen.core.config import get_settings
from draftgen.db.session import close_db, create_all_tables


async def main() -> None:
    """Initialize the database."""
    settings = get_settings()
    try:
        await create_all_tables(settings)
    finally:
        await close_db()
    print("Database initialized successfully!")


if __name__ == "__main__":
    asyncio.run(main())
