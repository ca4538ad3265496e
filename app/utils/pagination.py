from typing import Any, Callable, Optional

from sqlalchemy import func
from sqlmodel import select

MAX_LIMIT = 100


def paginate(
    *,
    session,
    query,
    page: int = 1,
    limit: int = 10,
    serializer: Optional[Callable[[Any], Any]] = None,
):
    """Run ``query`` one page at a time; ``serializer`` turns rows into response dicts."""
    page = max(page, 1)
    limit = min(limit, MAX_LIMIT) if limit >= 1 else 10

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()
    total_pages = (total + limit - 1) // limit

    rows = session.exec(
        query.offset((page - 1) * limit).limit(limit)
    ).all()

    return {
        "total_items": total,
        "total_pages": total_pages,
        "current_page": page,
        "limit": limit,
        "has_next": page < total_pages,
        "has_previous": page > 1,
        "results": [serializer(r) for r in rows] if serializer else rows,
    }
