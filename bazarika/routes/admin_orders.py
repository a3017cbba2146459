# -------- ADMIN ORDERS --------
import logging
from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlmodel import Session, select

from bazarika.constants.order_status import OrderStatus
from bazarika.database import get_session
from bazarika.dependencies.admin import require_admin
from bazarika.models.order import Order
from bazarika.models.order_item import OrderItem
from bazarika.models.profile import Profile
from bazarika.schemas.order_schemas import OrderStatusUpdate, PaymentStatusUpdate
from bazarika.services.order_service import OrderTransitionError, change_status, serialize_order
from bazarika.utils.pagination import paginate
from bazarika.utils.search import LIKE_ESCAPE, like_pattern

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
def list_orders(
    page: int = 1,
    limit: int = 20,
    search: str | None = None,
    status: OrderStatus | None = None,
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin)
):
    query = (
        select(Order, Profile)
        .join(Profile, Profile.id == Order.user_id)
    )

    if search:
        like = like_pattern(search)
        query = query.where(
            or_(
                Order.order_number.ilike(like, escape=LIKE_ESCAPE),
                Profile.full_name.ilike(like, escape=LIKE_ESCAPE),
                Profile.email.ilike(like, escape=LIKE_ESCAPE),
            )
        )

    if status:
        query = query.where(Order.status == status.value)

    if start_date:
        query = query.where(Order.created_at >= start_date)

    if end_date:
        # inclusive of the whole end day
        query = query.where(Order.created_at < end_date + timedelta(days=1))

    query = query.order_by(Order.created_at.desc(), Order.id.desc())

    return paginate(
        session=session,
        query=query,
        page=page,
        limit=limit,
        serialize=lambda row: {
            "id": row[0].id,
            "order_number": row[0].order_number,
            "customer_name": row[1].full_name or "Customer",
            "customer_email": row[1].email,
            "date": row[0].created_at,
            "total": row[0].total,
            "status": row[0].status,
            "payment_status": row[0].payment_status,
        },
    )


@router.get("/{order_id}")
def order_details(
    order_id: int,
    session: Session = Depends(get_session),
    _: Profile = Depends(require_admin),
):
    result = session.exec(
        select(Order, Profile)
        .join(Profile, Profile.id == Order.user_id)
        .where(Order.id == order_id)
    ).first()

    if not result:
        raise HTTPException(status_code=404, detail="Order not found")

    order, customer = result

    items = session.exec(
        select(OrderItem).where(OrderItem.order_id == order.id)
    ).all()

    data = serialize_order(order, items)
    data["customer"] = {
        "id": customer.id,
        "name": customer.full_name,
        "email": customer.email,
        "phone": customer.phone,
    }
    return data


@router.patch("/{order_id}/status")
def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(404, "Order not found")

    try:
        order = change_status(session, order, data.status.value, changed_by=admin.id)
    except OrderTransitionError as e:
        raise HTTPException(400, str(e))

    return {"message": "Order status updated", "order_id": order.id, "status": order.status}


@router.patch("/{order_id}/payment-status")
def update_payment_status(
    order_id: int,
    data: PaymentStatusUpdate,
    session: Session = Depends(get_session),
    admin: Profile = Depends(require_admin),
):
    order = session.get(Order, order_id)
    if not order:
        raise HTTPException(404, "Order not found")

    previous = order.payment_status
    order.payment_status = data.payment_status.value
    order.updated_at = datetime.utcnow()
    session.add(order)
    session.commit()

    logger.info(f"Order {order.order_number} payment {previous} -> {order.payment_status} by {admin.id}")

    return {"message": "Payment status updated", "order_id": order.id, "payment_status": order.payment_status}
