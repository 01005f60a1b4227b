"""
Pagination utilities
"""
from sqlalchemy.orm import Query
from typing import Tuple, List, Any


def paginate(
    query: Query,
    page: int = 1,
    per_page: int = 10
) -> Tuple[List[Any], int]:
    """
    Paginate SQLAlchemy query

    Args:
        query: SQLAlchemy query object, already ordered
        page: Page number (1-indexed)
        per_page: Items per page

    Returns:
        Tuple of (items, total_count)
    """
    # Ensure page is at least 1
    page = max(1, page)
    per_page = max(1, per_page)

    # Get total count of the unpaged filter
    total = query.order_by(None).count()

    # Calculate offset
    offset = (page - 1) * per_page

    # Get items
    items = query.limit(per_page).offset(offset).all()

    return items, total
