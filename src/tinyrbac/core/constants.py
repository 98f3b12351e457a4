from __future__ import annotations

from typing import Dict, Optional

# Fixed capacities of an AccessModel. The matrix is MAX_ROLES * MAX_ACTIONS
# cells, each cell a MAX_RESOURCES-wide bitset.
MAX_ROLES = 20
MAX_ACTIONS = 5  # HTTP
MAX_RESOURCES = 64

WILDCARD = "*"

# Every bit of a MAX_RESOURCES-wide cell.
ALL_RESOURCES = (1 << MAX_RESOURCES) - 1

# Sentinel stored in unused index slots; never a valid role/resource name.
EMPTY_SLOT = ""

ACTION_OFFSETS: Dict[str, int] = {
    "GET": 0,
    "POST": 1,
    "PUT": 2,
    "PATCH": 3,
    "DELETE": 4,
}

ACTIONS = tuple(ACTION_OFFSETS)


def action_offset(name: str) -> Optional[int]:
    """Return the matrix offset of an HTTP action, or None when it is not one of ACTIONS.

    Matching is exact: "get" is not "GET".
    """
    return ACTION_OFFSETS.get(name)


__all__ = [
    "MAX_ROLES",
    "MAX_ACTIONS",
    "MAX_RESOURCES",
    "WILDCARD",
    "ALL_RESOURCES",
    "EMPTY_SLOT",
    "ACTION_OFFSETS",
    "ACTIONS",
    "action_offset",
]
