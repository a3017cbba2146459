import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from bazarika.constants.order_status import OrderStatus
from bazarika.database import get_session
from bazarika.models.order import Order
from bazarika.models.order_item import OrderItem
from bazarika.models.product import Product
from bazarika.models.profile import Profile
from bazarika.models.review import Review
from bazarika.schemas.review_schemas import ReviewCreate, ReviewUpdate
from bazarika.utils.token import get_current_user, is_admin

logger = logging.getLogger(__name__)

router = APIRouter()


def _product_by_slug(session: Session, slug: str) -> Product:
    product = session.exec(
        select(Product).where(Product.slug == slug, Product.is_active == True)  # noqa: E712
    ).first()

    if not product:
        raise HTTPException(404, f"Product '{slug}' not found")

    return product


def has_delivered_purchase(session: Session, user_id: str, product_id: int) -> bool:
    row = session.exec(
        select(OrderItem.id)
        .join(Order, Order.id == OrderItem.order_id)
        .where(
            Order.user_id == user_id,
            Order.status == OrderStatus.delivered.value,
            OrderItem.product_id == product_id,
        )
    ).first()
    return row is not None


# ---------------------------------------------------------
# LIST REVIEWS FOR A PRODUCT (BY SLUG)
# ---------------------------------------------------------

@router.get("/products/{slug}")
def list_reviews(
    slug: str,
    session: Session = Depends(get_session)
):
    product = _product_by_slug(session, slug)

    rows = session.exec(
        select(Review, Profile)
        .join(Profile, Profile.id == Review.user_id)
        .where(Review.product_id == product.id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    ).all()

    ratings = [review.rating for review, _ in rows]
    avg_rating = round(sum(ratings) / len(ratings), 2) if ratings else 0

    return {
        "product_slug": slug,
        "average_rating": avg_rating,
        "total_reviews": len(rows),
        "reviews": [
            {
                "id": review.id,
                "rating": review.rating,
                "title": review.title,
                "comment": review.comment,
                "is_verified_purchase": review.is_verified_purchase,
                "author": profile.full_name or "Customer",
                "created_at": review.created_at,
            }
            for review, profile in rows
        ],
    }


# ---------------------------------------------------------
# CREATE A REVIEW
# ---------------------------------------------------------

@router.post("/products/{slug}", status_code=201)
def create_review(
    slug: str,
    data: ReviewCreate,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    product = _product_by_slug(session, slug)

    review = Review(
        product_id=product.id,
        user_id=current_user.id,
        rating=data.rating,
        title=data.title or None,
        comment=data.comment or None,
        is_verified_purchase=has_delivered_purchase(session, current_user.id, product.id),
    )

    session.add(review)
    session.commit()
    session.refresh(review)

    logger.info(f"Review {review.id} added for product {product.id} by {current_user.id}")

    return {"message": "Review added", "review": review}


# ---------------------------------------------------------
# UPDATE OWN REVIEW
# ---------------------------------------------------------

@router.put("/{review_id}")
def update_review(
    review_id: int,
    data: ReviewUpdate,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    review = session.get(Review, review_id)

    if not review or review.user_id != current_user.id:
        raise HTTPException(404, "Review not found")

    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(review, key, value)

    review.updated_at = datetime.utcnow()

    session.add(review)
    session.commit()
    session.refresh(review)

    return {"message": "Review updated successfully", "review": review}


# ---------------------------------------------------------
# DELETE REVIEW (owner or admin)
# ---------------------------------------------------------

@router.delete("/{review_id}")
def delete_review(
    review_id: int,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    review = session.get(Review, review_id)

    if not review or (review.user_id != current_user.id and not is_admin(current_user)):
        raise HTTPException(404, "Review not found")

    session.delete(review)
    session.commit()

    return {"message": "Review deleted successfully"}
