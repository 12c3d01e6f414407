"""
Page-number pagination helpers for list endpoints.

Page and size come straight from the query string, so they are normalized
here before the storage offset is computed.
"""
from typing import Tuple
from pydantic import BaseModel

from .config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class Paging(BaseModel):
    """Pagination metadata returned alongside a page of results."""
    page: int
    size: int
    total_rows: int
    total_pages: int


def normalize(page: int, size: int) -> Tuple[int, int]:
    """
    Coerce page and size into usable values.

    A page below 1 becomes 1, a size below 1 becomes DEFAULT_PAGE_SIZE, and
    a size above MAX_PAGE_SIZE is capped.
    """
    if page < 1:
        page = 1
    if size < 1:
        size = DEFAULT_PAGE_SIZE
    return page, min(size, MAX_PAGE_SIZE)


def offset_for(page: int, size: int) -> int:
    """Number of rows to skip for a normalized page."""
    return (page - 1) * size


def paginate(page: int, size: int, total_rows: int) -> Paging:
    """
    Build the paging descriptor for a page of a result set.

    Args:
        page: Requested page number (1-based)
        size: Requested page size
        total_rows: Total number of rows matching the query

    Returns:
        Paging with total_pages = ceil(total_rows / size)
    """
    page, size = normalize(page, size)
    total_pages = -(-total_rows // size) if total_rows > 0 else 0
    return Paging(page=page, size=size, total_rows=total_rows, total_pages=total_pages)
