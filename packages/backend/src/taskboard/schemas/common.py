"""Response envelope and pagination shapes.

Learn: Every successful response has the same outer shape:

  {"statusCode": 200, "data": {...}, "message": "...", "success": true}

Failures use the envelope in taskboard.errors. Wire names are camelCase;
Python attributes stay snake_case via an alias generator.
"""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Keeps (page - 1) * limit within a 64-bit OFFSET
MAX_PAGE = 1_000_000


class CamelModel(BaseModel):
    """Base for response models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def envelope(status_code: int, data: Any, message: str = "Success") -> dict:
    return {
        "statusCode": status_code,
        "data": data,
        "message": message,
        "success": status_code < 400,
    }


def pagination(page: int, limit: int, total: int, total_key: str) -> dict:
    """Pagination block, e.g. total_key="totalTasks" or "totalUsers"."""
    return {
        "currentPage": page,
        "totalPages": math.ceil(total / limit) if limit else 0,
        total_key: total,
        "limit": limit,
    }
