"""Page arithmetic shared by the listing operations."""

import math


def page_window(page, limit, default_size: int, max_size: int) -> tuple[int, int, int]:
    """Clamp ``page`` and ``limit`` and return ``(page, limit, offset)``."""
    page = max(1, int(page))
    limit = min(max(1, int(limit or default_size)), max_size)
    return page, limit, (page - 1) * limit


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0
