"""
Offset/limit pagination shared by the house and booking listings.

Query params `page`, `limit` and `sort` ("price,-created_at") are turned into
an ORDER BY / OFFSET / LIMIT on the given statement.
"""
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from homestay.core.errors import ValidationError
from homestay.schemas.common import PageLink, Pagination


@dataclass
class PageParams:
    page: int = 1
    limit: int = 25
    sort: Optional[str] = None


def parse_sort(sort: Optional[str], allowed: dict[str, Any], default: str) -> list:
    clauses = []
    for raw in (sort or default).split(","):
        field = raw.strip()
        if not field:
            continue
        descending = field.startswith("-")
        name = field.lstrip("-")
        column = allowed.get(name)
        if column is None:
            raise ValidationError(
                f"Cannot sort by '{name}'. Allowed: {', '.join(sorted(allowed))}"
            )
        clauses.append(column.desc() if descending else column.asc())
    return clauses


async def paginate(
    db: AsyncSession,
    stmt: Select,
    params: PageParams,
    allowed_sort: dict[str, Any],
    default_sort: str = "-created_at",
) -> tuple[list, int, Pagination]:
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar_one()

    start_index = (params.page - 1) * params.limit
    end_index = params.page * params.limit

    stmt = (
        stmt.order_by(*parse_sort(params.sort, allowed_sort, default_sort))
        .offset(start_index)
        .limit(params.limit)
    )
    items = list((await db.execute(stmt)).scalars().all())

    pagination = Pagination()
    if end_index < total:
        pagination.next = PageLink(page=params.page + 1, limit=params.limit)
    if start_index > 0:
        pagination.prev = PageLink(page=params.page - 1, limit=params.limit)

    return items, total, pagination
