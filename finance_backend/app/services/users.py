"""
User registration.

Credentials are handled by the identity provider; registering here creates
the owner record together with its system categories.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.core.exceptions import NameConflictError
from finance_backend.app.db.session import unit_of_work
from finance_backend.app.models.user import User
from finance_backend.app.services.categories import add_system_categories

logger = logging.getLogger("finance.users")


async def register_user(db: AsyncSession, email: str, name: str) -> User:
    """
    Create a user and its SYS_INCOME / SYS_EXPENSES categories atomically.

    Raises:
        NameConflictError: a user with this email already exists
    """
    async with unit_of_work(db):
        existing = await db.execute(select(User).where(User.email == email))
        if existing.scalar_one_or_none():
            raise NameConflictError("User", email)

        user = User(email=email, name=name, is_active=True)
        db.add(user)
        await db.flush()

        await add_system_categories(db, user.id)

    await db.refresh(user)
    logger.info("User %s registered", user.id)
    return user
