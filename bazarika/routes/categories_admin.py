import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from bazarika.database import get_session
from bazarika.dependencies.admin import require_admin
from bazarika.models.category import Category
from bazarika.models.product import Product
from bazarika.models.profile import Profile
from bazarika.schemas.category_schemas import CategoryCreate, CategoryUpdate
from bazarika.services.catalog_service import unique_slug

logger = logging.getLogger(__name__)

router = APIRouter()


def _name_taken(session: Session, name: str, exclude_id: int | None = None) -> bool:
    query = select(Category).where(Category.name == name)
    if exclude_id is not None:
        query = query.where(Category.id != exclude_id)
    return session.exec(query).first() is not None


def _check_parent(session: Session, parent_id: int | None, category_id: int | None = None):
    if parent_id is None:
        return
    if parent_id == category_id:
        raise HTTPException(400, "A category cannot be its own parent")
    if not session.get(Category, parent_id):
        raise HTTPException(400, "Invalid parent_id")


@router.get("/")
def list_categories(
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    return session.exec(select(Category).order_by(Category.name)).all()


@router.post("/", status_code=201)
def create_category(
    data: CategoryCreate,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    if _name_taken(session, data.name):
        raise HTTPException(400, "Category already exists")

    _check_parent(session, data.parent_id)

    category = Category(
        name=data.name,
        slug=unique_slug(session, Category, data.slug or data.name),
        description=data.description,
        image_url=data.image_url,
        parent_id=data.parent_id,
    )

    session.add(category)
    session.commit()
    session.refresh(category)

    logger.info(f"Category {category.id} ({category.slug}) created")
    return category


@router.get("/{category_id}")
def get_category(
    category_id: int,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    category = session.get(Category, category_id)
    if not category:
        raise HTTPException(404, "Category not found")
    return category


@router.put("/{category_id}")
def update_category(
    category_id: int,
    data: CategoryUpdate,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    category = session.get(Category, category_id)
    if not category:
        raise HTTPException(404, "Category not found")

    changes = data.model_dump(exclude_unset=True)

    if changes.get("name"):
        if _name_taken(session, changes["name"], exclude_id=category.id):
            raise HTTPException(400, "Category already exists")
        category.name = changes["name"]

    if changes.get("slug"):
        category.slug = unique_slug(session, Category, changes["slug"], exclude_id=category.id)

    if "parent_id" in changes:
        _check_parent(session, changes["parent_id"], category.id)
        category.parent_id = changes["parent_id"]

    for key in ("description", "image_url"):
        if key in changes:
            setattr(category, key, changes[key])

    category.updated_at = datetime.utcnow()
    session.add(category)
    session.commit()
    session.refresh(category)

    return category


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    category = session.get(Category, category_id)
    if not category:
        raise HTTPException(404, "Category not found")

    # products stay in the catalog without a category
    products = session.exec(select(Product).where(Product.category_id == category_id)).all()
    for product in products:
        product.category_id = None
        session.add(product)

    children = session.exec(select(Category).where(Category.parent_id == category_id)).all()
    for child in children:
        child.parent_id = None
        session.add(child)

    session.flush()
    session.delete(category)
    session.commit()

    logger.info(f"Category {category_id} deleted, {len(products)} products uncategorised")
    return {"message": "Category deleted"}
