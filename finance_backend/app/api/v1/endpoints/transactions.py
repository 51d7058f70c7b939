"""
Transaction API Endpoints.

Every mutation goes through the validation gate and the ledger engine in a
single database transaction.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.core.config import settings
from finance_backend.app.core.dependencies import get_current_user_id
from finance_backend.app.core.exceptions import InvalidDataError
from finance_backend.app.db.session import get_db
from finance_backend.app.domain.ledger.shapes import EntityRef
from finance_backend.app.models.enums import EntityType, TransactionShape
from finance_backend.app.schemas.transaction import (
    TransactionCreate, TransactionUpdate,
    TransactionResponse, TransactionListResponse, TransactionTotalResponse
)
from finance_backend.app.services import transactions as transaction_service

router = APIRouter(prefix="/transactions", tags=["Transactions"])


def _entity_ref(entity_type: Optional[EntityType], entity_id: Optional[int], side: str) -> Optional[EntityRef]:
    if entity_type is None and entity_id is None:
        return None
    if entity_type is None or entity_id is None:
        raise InvalidDataError(f"{side}_type and {side}_id must be given together", reason=f"incomplete {side} filter")
    return EntityRef(entity_type, entity_id)


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    shape: Optional[TransactionShape] = Query(None, description="INCOME, EXPENSE or TRANSFER"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    from_type: Optional[EntityType] = Query(None),
    from_id: Optional[int] = Query(None, ge=1),
    to_type: Optional[EntityType] = Query(None),
    to_id: Optional[int] = Query(None, ge=1),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Items per page"),
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """List the user's transactions, newest first."""
    transactions, total = await transaction_service.list_transactions(
        db, owner_id,
        shape=shape,
        start=start_date,
        end=end_date,
        from_ref=_entity_ref(from_type, from_id, "from"),
        to_ref=_entity_ref(to_type, to_id, "to"),
        page=page,
        page_size=page_size,
    )
    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(transaction) for transaction in transactions],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/total-sum", response_model=TransactionTotalResponse)
async def total_transactions_sum(
    shape: TransactionShape = Query(...),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    total = await transaction_service.total_transactions_sum(db, owner_id, shape, start_date, end_date)
    return TransactionTotalResponse(shape=shape, start_date=start_date, end_date=end_date, total_sum=total)


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction_data: TransactionCreate,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    transaction = await transaction_service.create_transaction(db, owner_id, transaction_data)
    return TransactionResponse.model_validate(transaction)


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    transaction = await transaction_service.get_transaction(db, transaction_id, owner_id)
    return TransactionResponse.model_validate(transaction)


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: int,
    transaction_data: TransactionUpdate,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Replace a transaction; its old effect is reversed and the new one applied."""
    transaction = await transaction_service.update_transaction(db, transaction_id, owner_id, transaction_data)
    return TransactionResponse.model_validate(transaction)


@router.delete("/{transaction_id}", response_model=TransactionResponse)
async def delete_transaction(
    transaction_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Delete a transaction and return it as it was."""
    transaction = await transaction_service.delete_transaction(db, transaction_id, owner_id)
    return TransactionResponse.model_validate(transaction)
