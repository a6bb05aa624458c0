import math
from sqlalchemy.orm import Query
from .schemas import Pagination

def paginate(query: Query, page: int, limit: int) -> tuple[list, Pagination]:
    """Run ``query`` for one page; callers apply ordering first."""
    total = query.order_by(None).count()
    rows = query.offset((page - 1) * limit).limit(limit).all()
    return rows, Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=math.ceil(total / limit) if limit else 0,
    )
