"""
Offset pagination helpers shared by the listing services
"""
import math
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Query


def page_meta(total: int, page: int, per_page: int) -> Dict[str, int]:
    return {
        "current_page": page,
        "last_page": max(1, math.ceil(total / per_page)) if per_page else 1,
        "total": total,
        "per_page": per_page,
    }


def paginate(query: Query, page: int, per_page: int) -> Tuple[List[Any], Dict[str, int]]:
    """
    Apply offset/limit to query and build page metadata

    Args:
        query: Filtered and ordered query
        page: 1-based page number
        per_page: Page size

    Returns:
        (items, meta) where meta has current_page, last_page, total, per_page
    """
    page = max(page, 1)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * per_page).limit(per_page).all()
    return items, page_meta(total, page, per_page)


def resolve_sort(sort_by: str, sort_direction: str, allowed: Dict[str, Any], default: str):
    """
    Map a client sort key to an orderable column

    Unknown keys fall back to default; direction is asc unless 'desc'.
    Returns (key, column_expression).
    """
    key = sort_by if sort_by in allowed else default
    column = allowed[key]
    direction = (sort_direction or "").lower()
    return key, (column.desc() if direction == "desc" else column.asc())
