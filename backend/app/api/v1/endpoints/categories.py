from typing import List

from fastapi import APIRouter, Depends, status

from app.api.deps import get_category_service
from app.core.security import get_admin_user
from app.db.models.user import User
from app.schemas import (
    ApiResponse, CategoryCreate, CategoryReorderRequest, CategoryResponse,
    CategoryUpdate, ok,
)
from app.services import CategoryService

router = APIRouter()


@router.get("", response_model=ApiResponse[List[CategoryResponse]])
async def list_categories(
    service: CategoryService = Depends(get_category_service),
):
    """All categories in display order"""
    return ok(service.list())


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[CategoryResponse])
async def create_category(
    data: CategoryCreate,
    admin: User = Depends(get_admin_user),
    service: CategoryService = Depends(get_category_service),
):
    return ok(service.create(data), "Category created")


@router.post("/reorder", response_model=ApiResponse[List[CategoryResponse]])
async def reorder_categories(
    data: CategoryReorderRequest,
    admin: User = Depends(get_admin_user),
    service: CategoryService = Depends(get_category_service),
):
    return ok(service.reorder(data.categories))


@router.put("/{category_id}", response_model=ApiResponse[CategoryResponse])
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    admin: User = Depends(get_admin_user),
    service: CategoryService = Depends(get_category_service),
):
    """Rename a category; a new slug is carried over to its videos"""
    return ok(service.update(category_id, data), "Category updated")


@router.delete("/{category_id}", response_model=ApiResponse[None])
async def delete_category(
    category_id: int,
    admin: User = Depends(get_admin_user),
    service: CategoryService = Depends(get_category_service),
):
    service.delete(category_id)
    return ok(message="Category deleted")
