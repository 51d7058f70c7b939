"""
Database seeding script for a local demo user.

Creates a demo user with its system categories, the starter accounts and
categories, and prints a bearer token for calling the API.
Run this script after the database is reachable.
"""

import asyncio
from datetime import timedelta

from sqlalchemy import select

from finance_backend.app.core.jwt import create_access_token
from finance_backend.app.db.session import AsyncSessionLocal, Base, engine
from finance_backend.app.models.user import User
from finance_backend.app.services.accounts import create_example_accounts
from finance_backend.app.services.categories import create_example_categories
from finance_backend.app.services.users import register_user

# Register every table on Base.metadata before create_all
import finance_backend.app.main  # noqa: F401

DEMO_EMAIL = "demo@finance.local"


async def seed_users():
    """
    Seed the demo user.

    Creates:
    - 1 user with SYS_INCOME / SYS_EXPENSES
    - example accounts (Savings, Cash, Bank account)
    - example expense categories
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting user seeding...")

        result = await db.execute(select(User).where(User.email == DEMO_EMAIL))
        user = result.scalar_one_or_none()

        if user:
            print("ℹ️  Demo user already exists, skipping registration")
        else:
            user = await register_user(db, DEMO_EMAIL, "Demo User")
            print(f"✅ Created demo user (id: {user.id}, email: {DEMO_EMAIL})")

        accounts = await create_example_accounts(db, user.id)
        print(f"✅ Created {len(accounts)} example accounts")

        categories = await create_example_categories(db, user.id)
        print(f"✅ Created {len(categories)} example categories")

    token = create_access_token(
        data={"sub": DEMO_EMAIL, "user_id": user.id},
        expires_delta=timedelta(days=1)
    )

    print("\n🎉 Seeding completed successfully!")
    print("\nBearer token (valid for 24h):")
    print(f"  {token}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed_users())
