from fastapi import APIRouter, Depends
from sqlmodel import Session, func, select

from bazarika.config import settings
from bazarika.constants.order_status import OrderStatus
from bazarika.database import get_session
from bazarika.dependencies.admin import require_admin
from bazarika.models.order import Order
from bazarika.models.product import Product
from bazarika.models.profile import Profile

router = APIRouter()

RECENT_ORDERS_LIMIT = 5
LOW_STOCK_LIMIT = 5


# -------- ADMIN DASHBOARD --------

@router.get("/dashboard")
def admin_dashboard(
    session: Session = Depends(get_session),
    current_admin: Profile = Depends(require_admin)
):
    total_products = session.exec(select(func.count(Product.id))).one()
    total_orders = session.exec(select(func.count(Order.id))).one()
    total_users = session.exec(select(func.count(Profile.id))).one()

    pending_orders = session.exec(
        select(func.count(Order.id)).where(Order.status == OrderStatus.pending.value)
    ).one()

    total_revenue = session.exec(
        select(func.coalesce(func.sum(Order.total), 0))
        .where(Order.status != OrderStatus.cancelled.value)
    ).one()

    recent = session.exec(
        select(Order, Profile)
        .join(Profile, Profile.id == Order.user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(RECENT_ORDERS_LIMIT)
    ).all()

    low_stock = session.exec(
        select(Product)
        .where(
            Product.stock_quantity < settings.LOW_STOCK_THRESHOLD,
            Product.is_active == True,  # noqa: E712
        )
        .order_by(Product.stock_quantity, Product.id)
        .limit(LOW_STOCK_LIMIT)
    ).all()

    return {
        "cards": {
            "total_products": total_products,
            "total_orders": total_orders,
            "pending_orders": pending_orders,
            "total_users": total_users,
            "total_revenue": round(float(total_revenue), 2),
        },
        "recent_orders": [
            {
                "id": o.id,
                "order_number": o.order_number,
                "customer_name": p.full_name or "Customer",
                "total": o.total,
                "status": o.status,
                "created_at": o.created_at,
            }
            for o, p in recent
        ],
        "low_stock_products": [
            {"id": p.id, "name": p.name, "stock_quantity": p.stock_quantity}
            for p in low_stock
        ],
        "admin_info": {
            "id": current_admin.id,
            "email": current_admin.email,
        },
    }
