"""
Ownership guard for exclusively owned resources.

Accounts, categories, transactions and reporting periods all belong to
exactly one user; no role may act on another user's records.
"""

from finance_backend.app.core.exceptions import ResourceOwnershipError


def verify_ownership(resource_owner_id: int, owner_id: int) -> bool:
    """True when the resource belongs to the acting user."""
    return resource_owner_id == owner_id


class OwnershipGuard:
    """
    Class-based ownership guard.

    Usage:
        ownership_guard = OwnershipGuard()

        account = await get_account_row(db, account_id)
        ownership_guard.enforce(account.owner_id, owner_id, "Account")
    """

    def enforce(
        self,
        resource_owner_id: int,
        owner_id: int,
        resource_name: str = "resource"
    ):
        """
        Enforce ownership validation.

        Raises:
            ResourceOwnershipError (403) if the actor is not the owner
        """
        if not verify_ownership(resource_owner_id, owner_id):
            raise ResourceOwnershipError(resource_name)


ownership_guard = OwnershipGuard()
