from sqlalchemy import func
from sqlmodel import select
from typing import Any, Callable, Optional

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def paginate(
    *,
    session,
    query,
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
    serialize: Optional[Callable[[Any], Any]] = None,
):
    """
    Run query one page at a time.

    The count ignores ORDER BY; serialize, when given, is applied to every
    row of the page (rows may be model instances or tuples from a join).
    """
    page = max(page, 1)
    limit = DEFAULT_LIMIT if limit < 1 else min(limit, MAX_LIMIT)

    total = session.exec(
        select(func.count()).select_from(query.order_by(None).subquery())
    ).one()

    rows = session.exec(
        query.offset((page - 1) * limit).limit(limit)
    ).all()

    total_pages = (total + limit - 1) // limit

    return {
        "total_items": total,
        "total_pages": total_pages,
        "current_page": page,
        "limit": limit,
        "has_next": page < total_pages,
        "results": [serialize(row) for row in rows] if serialize else rows,
    }
