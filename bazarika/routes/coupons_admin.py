import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from bazarika.constants.order_status import DiscountType
from bazarika.database import get_session
from bazarika.dependencies.admin import require_admin
from bazarika.models.coupon import Coupon
from bazarika.models.order import Order
from bazarika.models.profile import Profile
from bazarika.schemas.coupon_schemas import CouponCreate, CouponUpdate

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_coupon(session: Session, coupon_id: int) -> Coupon:
    coupon = session.get(Coupon, coupon_id)
    if not coupon:
        raise HTTPException(404, "Coupon not found")
    return coupon


def _code_taken(session: Session, code: str, exclude_id: int | None = None) -> bool:
    query = select(Coupon).where(Coupon.code == code)
    if exclude_id is not None:
        query = query.where(Coupon.id != exclude_id)
    return session.exec(query).first() is not None


@router.get("/")
def list_coupons(
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    return session.exec(select(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc())).all()


@router.post("/", status_code=201)
def create_coupon(
    data: CouponCreate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin)
):
    if _code_taken(session, data.code):
        raise HTTPException(400, "A coupon with this code already exists.")

    values = data.model_dump()
    values["discount_type"] = data.discount_type.value
    coupon = Coupon(**values)

    session.add(coupon)
    session.commit()
    session.refresh(coupon)

    logger.info(f"Coupon {coupon.code} created by {admin.id}")
    return coupon


@router.get("/{coupon_id}")
def get_coupon(
    coupon_id: int,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    return _get_coupon(session, coupon_id)


@router.put("/{coupon_id}")
def update_coupon(
    coupon_id: int,
    data: CouponUpdate,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    coupon = _get_coupon(session, coupon_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("code") and _code_taken(session, changes["code"], exclude_id=coupon.id):
        raise HTTPException(400, "A coupon with this code already exists.")

    # these columns are NOT NULL
    for key in ("code", "discount_type", "discount_value", "min_order_amount", "is_active"):
        if key in changes and changes[key] is None:
            changes.pop(key)

    if "discount_type" in changes:
        changes["discount_type"] = DiscountType(changes["discount_type"]).value

    for key, value in changes.items():
        setattr(coupon, key, value)

    if coupon.discount_type == DiscountType.percentage.value and coupon.discount_value > 100:
        raise HTTPException(400, "Percentage discount cannot exceed 100")

    coupon.updated_at = datetime.utcnow()
    session.add(coupon)
    session.commit()
    session.refresh(coupon)

    return coupon


@router.post("/{coupon_id}/toggle")
def toggle_coupon(
    coupon_id: int,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    coupon = _get_coupon(session, coupon_id)

    coupon.is_active = not coupon.is_active
    coupon.updated_at = datetime.utcnow()
    session.add(coupon)
    session.commit()
    session.refresh(coupon)

    return {
        "message": "Coupon activated" if coupon.is_active else "Coupon deactivated",
        "coupon": coupon,
    }


@router.delete("/{coupon_id}")
def delete_coupon(
    coupon_id: int,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    coupon = _get_coupon(session, coupon_id)

    # placed orders keep their discount_amount
    orders = session.exec(select(Order).where(Order.coupon_id == coupon.id)).all()
    for order in orders:
        order.coupon_id = None
        session.add(order)

    session.flush()
    session.delete(coupon)
    session.commit()

    return {"message": "Coupon deleted"}
