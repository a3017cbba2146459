from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select
from sqlalchemy import func

from bazarika.database import get_session
from bazarika.models.product import Product
from bazarika.models.profile import Profile
from bazarika.models.wishlist import WishlistItem
from bazarika.utils.token import get_current_user

router = APIRouter()


def _find(session: Session, user_id: str, product_id: int):
    return session.exec(
        select(WishlistItem)
        .where(WishlistItem.user_id == user_id, WishlistItem.product_id == product_id)
    ).first()


@router.post("/{product_id}")
def add_to_wishlist(
    product_id: int,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    if not session.get(Product, product_id):
        raise HTTPException(404, "Product not found")

    if _find(session, current_user.id, product_id):
        return {"message": "Already in wishlist"}

    session.add(WishlistItem(user_id=current_user.id, product_id=product_id))
    session.commit()

    return {"message": "Added to wishlist"}

@router.delete("/{product_id}")
def remove_from_wishlist(
    product_id: int,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    item = _find(session, current_user.id, product_id)

    if not item:
        raise HTTPException(404, "Wishlist item not found")

    session.delete(item)
    session.commit()

    return {"message": "Removed from wishlist"}


@router.get("/")
def get_wishlist(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    rows = session.exec(
        select(WishlistItem, Product)
        .join(Product, WishlistItem.product_id == Product.id)
        .where(WishlistItem.user_id == current_user.id)
        .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
    ).all()

    return [
        {
            "wishlist_id": w.id,
            "product_id": product.id,
            "name": product.name,
            "slug": product.slug,
            "price": product.price,
            "compare_at_price": product.compare_at_price,
            "in_stock": product.in_stock,
            "is_active": product.is_active,
            "image": product.images[0].url if product.images else None,
            "added_at": w.created_at,
        }
        for w, product in rows
    ]

@router.get("/status/{product_id}")
def wishlist_status(
    product_id: int,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    return {"in_wishlist": _find(session, current_user.id, product_id) is not None}



@router.get("/count")
def wishlist_count(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    count = session.exec(
        select(func.count()).select_from(WishlistItem).where(
            WishlistItem.user_id == current_user.id
        )
    ).one()

    return {"count": count or 0}
