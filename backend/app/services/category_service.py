from typing import List, Optional

import structlog
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.cache import ResponseCache
from app.core.errors import BadRequestError, NotFoundError
from app.db.models.category import Category
from app.db.models.video import Video
from app.schemas import CategoryCreate, CategoryOrder, CategoryResponse, CategoryUpdate

logger = structlog.get_logger()

DEFAULT_CATEGORIES = [
    ("Movies", "movies"),
    ("Music", "music"),
    ("Dramas", "dramas"),
    ("Cartoons", "cartoons"),
]

DUPLICATE_MESSAGE = "Category name or slug already exists"


def ensure_default_categories(db: Session) -> int:
    """Insert any missing default category; returns how many were added"""
    existing = {slug for (slug,) in db.query(Category.slug).all()}
    next_order = (db.query(func.max(Category.order)).scalar() or 0) + 1

    added = 0
    for name, slug in DEFAULT_CATEGORIES:
        if slug in existing:
            continue
        db.add(Category(name=name, slug=slug, order=next_order, is_default=True))
        next_order += 1
        added += 1

    if added:
        db.commit()
        logger.info("Default categories created", count=added)
    return added


class CategoryService:
    def __init__(self, db: Session, video_cache: Optional[ResponseCache] = None):
        self.db = db
        self.video_cache = video_cache

    def _ordered(self) -> List[CategoryResponse]:
        categories = self.db.query(Category).order_by(Category.order, Category.name).all()
        return [CategoryResponse.model_validate(c) for c in categories]

    def get_or_404(self, category_id: int) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError("Category not found")
        return category

    def list(self) -> List[CategoryResponse]:
        return self._ordered()

    def create(self, data: CategoryCreate) -> CategoryResponse:
        name = (data.name or "").strip()
        slug = (data.slug or "").strip().lower()
        if not name or not slug:
            raise BadRequestError("Name and slug are required")

        max_order = self.db.query(func.max(Category.order)).scalar()
        category = Category(
            name=name,
            slug=slug,
            order=(max_order or 0) + 1,
            is_default=False,
        )
        self.db.add(category)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise BadRequestError(DUPLICATE_MESSAGE)
        self.db.refresh(category)

        logger.info("Category created", category_id=category.id, slug=slug)
        return CategoryResponse.model_validate(category)

    def update(self, category_id: int, data: CategoryUpdate) -> CategoryResponse:
        category = self.get_or_404(category_id)
        old_slug = category.slug

        if data.name is not None and data.name.strip():
            category.name = data.name.strip()
        if data.slug is not None and data.slug.strip():
            category.slug = data.slug.strip().lower()

        if category.slug != old_slug:
            # Videos reference categories by slug
            self.db.query(Video).filter(Video.category == old_slug).update(
                {Video.category: category.slug}, synchronize_session=False
            )

        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise BadRequestError(DUPLICATE_MESSAGE)
        self.db.refresh(category)

        if category.slug != old_slug and self.video_cache is not None:
            self.video_cache.clear()

        logger.info("Category updated", category_id=category.id, slug=category.slug)
        return CategoryResponse.model_validate(category)

    def reorder(self, orders: List[CategoryOrder]) -> List[CategoryResponse]:
        for item in orders:
            updated = self.db.query(Category).filter(Category.id == item.id).update(
                {Category.order: item.order}, synchronize_session=False
            )
            if not updated:
                logger.warning("Reorder skipped unknown category", category_id=item.id)
            self.db.commit()
        return self._ordered()

    def delete(self, category_id: int) -> None:
        category = self.get_or_404(category_id)
        if category.is_default:
            raise BadRequestError("Cannot delete default category")

        in_use = self.db.query(func.count(Video.id)).filter(
            Video.category == category.slug
        ).scalar() or 0
        if in_use:
            raise BadRequestError(
                f"Cannot delete category with {in_use} video(s). "
                "Please move or delete videos first."
            )

        slug = category.slug
        self.db.delete(category)
        self.db.commit()
        logger.info("Category deleted", category_id=category_id, slug=slug)
