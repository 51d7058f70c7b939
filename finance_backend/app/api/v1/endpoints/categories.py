"""
Category API Endpoints.

System categories are never listed or editable through these routes.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from finance_backend.app.core.dependencies import get_current_user_id
from finance_backend.app.db.session import get_db
from finance_backend.app.models.enums import CategoryType
from finance_backend.app.schemas.category import (
    CategoryCreate, CategoryUpdate, CategoryLimitUpdate,
    CategoryResponse, CategoryListResponse, CategoryTotalResponse, CategoryPeriodSumResponse
)
from finance_backend.app.services import categories as category_service

router = APIRouter(prefix="/categories", tags=["Categories"])


@router.get("", response_model=CategoryListResponse)
async def list_categories(
    category_type: Optional[CategoryType] = Query(None, alias="type"),
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    categories = await category_service.list_categories(db, owner_id, category_type)
    return CategoryListResponse(
        categories=[CategoryResponse.model_validate(category) for category in categories],
        total=len(categories)
    )


@router.get("/total-sum", response_model=CategoryTotalResponse)
async def total_current_period_sum(
    category_type: CategoryType = Query(..., alias="type"),
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Current period sum across all user categories of one type."""
    total = await category_service.total_current_period_sum(db, owner_id, category_type)
    return CategoryTotalResponse(type=category_type, total_sum=total)


@router.post("/examples", response_model=CategoryListResponse, status_code=status.HTTP_201_CREATED)
async def create_example_categories(
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    categories = await category_service.create_example_categories(db, owner_id)
    return CategoryListResponse(
        categories=[CategoryResponse.model_validate(category) for category in categories],
        total=len(categories)
    )


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    category_data: CategoryCreate,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    category = await category_service.create_category(
        db, owner_id, category_data.name, category_data.type, category_data.limit
    )
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    category = await category_service.get_category(db, category_id, owner_id)
    return CategoryResponse.model_validate(category)


@router.get("/{category_id}/added-sum", response_model=CategoryPeriodSumResponse)
async def category_added_sum(
    category_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    total = await category_service.category_added_sum(db, category_id, owner_id, start_date, end_date)
    return CategoryPeriodSumResponse(category_id=category_id, start_date=start_date, end_date=end_date, sum=total)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    category_data: CategoryUpdate,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    category = await category_service.update_category(
        db, category_id, owner_id, category_data.model_dump(exclude_unset=True)
    )
    return CategoryResponse.model_validate(category)


@router.patch("/{category_id}/limit", response_model=CategoryResponse)
async def set_category_limit(
    category_id: int,
    limit_data: CategoryLimitUpdate,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    category = await category_service.set_category_limit(db, category_id, owner_id, limit_data.limit)
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}", response_model=CategoryResponse)
async def delete_category(
    category_id: int,
    owner_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Delete a user category. Its transactions are kept."""
    category = await category_service.delete_category(db, category_id, owner_id)
    return CategoryResponse.model_validate(category)
