from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from bazarika.constants.order_status import CUSTOMER_CANCELLABLE, OrderStatus
from bazarika.database import get_session
from bazarika.models.order import Order
from bazarika.models.order_item import OrderItem
from bazarika.models.profile import Profile
from bazarika.services.order_service import OrderTransitionError, change_status, serialize_order
from bazarika.utils.token import get_current_user

router = APIRouter()


def _own_order(session: Session, order_id: int, user: Profile) -> Order:
    order = session.get(Order, order_id)

    if not order or order.user_id != user.id:
        raise HTTPException(404, "Order not found")

    return order


@router.get("/")
def my_orders(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    orders = session.exec(
        select(Order)
        .where(Order.user_id == current_user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    ).all()

    return [
        {
            "id": order.id,
            "order_number": order.order_number,
            "date": order.created_at,
            "total": order.total,
            "status": order.status,
            "payment_status": order.payment_status,
        }
        for order in orders
    ]


@router.get("/{order_id}")
def my_order_details(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    order = _own_order(session, order_id, current_user)

    items = session.exec(
        select(OrderItem).where(OrderItem.order_id == order.id)
    ).all()

    return serialize_order(order, items)


@router.post("/{order_id}/cancel")
def cancel_my_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(get_current_user)
):
    order = _own_order(session, order_id, current_user)

    if order.status not in CUSTOMER_CANCELLABLE:
        raise HTTPException(
            400,
            f"Order cannot be cancelled once it is {order.status}"
        )

    try:
        order = change_status(session, order, OrderStatus.cancelled.value, changed_by=current_user.id)
    except OrderTransitionError as e:
        raise HTTPException(400, str(e))

    return {"message": "Order cancelled", "order_id": order.id, "status": order.status}
