"""Create every Shop Service table in the configured database.

Usage:
    python scripts/shop/init_schema.py [--drop]
"""

import argparse
import asyncio
import os
import sys

# Add project root to path to import libs
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from libs.common.config import get_settings
from libs.db.base import Base
from libs.db.config import create_engine

# Registers every table on Base.metadata
from services.shop_service import models  # noqa: F401


async def init_schema(drop: bool) -> None:
    settings = get_settings()
    engine = create_engine(settings)
    try:
        async with engine.begin() as conn:
            if drop:
                print("Dropping existing tables...")
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
    finally:
        await engine.dispose()

    for table in Base.metadata.sorted_tables:
        print(f"  ✅ {table.name}")
    print("Schema ready.")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--drop", action="store_true", help="drop tables first")
    args = parser.parse_args()
    asyncio.run(init_schema(args.drop))


if __name__ == "__main__":
    main()
