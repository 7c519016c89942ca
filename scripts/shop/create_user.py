"""Register a shop user (customer or admin) from the command line.

Usage:
    python scripts/shop/create_user.py alice alice@example.com Alice Smith --password secret --admin
"""

import argparse
import asyncio
import getpass
import os
import sys

# Add project root to path to import libs
sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from libs.common.config import get_settings
from libs.common.errors import ServiceError
from libs.db.config import create_engine
from libs.db.gateway import Database
from services.shop_service.domain import User
from services.shop_service.models import UserType
from services.shop_service.services import user_service


async def create_user(args: argparse.Namespace, password: str) -> int:
    db = Database(create_engine(get_settings()))
    try:
        user = User(
            username=args.username,
            email=args.email,
            first_name=args.first_name,
            last_name=args.last_name,
            phone=args.phone,
            user_type=UserType.ADMIN if args.admin else UserType.CUSTOMER,
        )
        try:
            user_id = await user_service.register_user(db, user, password=password)
        except ServiceError as exc:
            print(f"❌ {exc.message}")
            return 1
        print(f"✅ Created {user.user_type.value} {user.username} with ID {user_id}")
        return 0
    finally:
        await db.close()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create a shop user")
    parser.add_argument("username")
    parser.add_argument("email")
    parser.add_argument("first_name")
    parser.add_argument("last_name")
    parser.add_argument("--phone")
    parser.add_argument("--password", help="prompted for when omitted")
    parser.add_argument("--admin", action="store_true")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    return asyncio.run(create_user(args, password))


if __name__ == "__main__":
    sys.exit(main())
