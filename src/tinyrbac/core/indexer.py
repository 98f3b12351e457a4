from __future__ import annotations

from typing import Tuple

from .constants import EMPTY_SLOT, MAX_RESOURCES, MAX_ROLES
from .errors import DuplicateRoleError
from .model import Policy
from .validator import unique_resources


def _pad(names: list[str], size: int) -> Tuple[str, ...]:
    return tuple(names) + (EMPTY_SLOT,) * (size - len(names))


def assign_indices(policy: Policy) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Return (role_index, resource_index) for a validated policy.

    A name's index is its position in the lexicographically sorted set of names
    (Python string order, i.e. by code point), so the result depends only on which
    names exist and never on declaration order. Both tuples are padded with the
    empty sentinel to MAX_ROLES / MAX_RESOURCES.
    """
    resources = sorted(unique_resources(policy.resources))

    roles = sorted(role.name for role in policy.roles)
    for prev, cur in zip(roles, roles[1:]):
        if prev == cur:
            raise DuplicateRoleError(cur)

    return _pad(roles, MAX_ROLES), _pad(resources, MAX_RESOURCES)


__all__ = ["assign_indices"]
