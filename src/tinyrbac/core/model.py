from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple

from .constants import ACTIONS, MAX_ACTIONS
from .errors import QueryError


@dataclass(frozen=True)
class ResourceGrant:
    """Actions a role may perform on one resource (or on every resource via "*")."""

    resource_name: str
    actions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Role:
    name: str
    description: str = ""
    resource_grants: Tuple[ResourceGrant, ...] = ()
    # index of the role in the source document, when decoded from one
    position: Optional[int] = field(default=None, compare=False)


@dataclass(frozen=True)
class Policy:
    """A decoded policy document, as handed to the build pipeline."""

    description: str = ""
    resources: Tuple[str, ...] = ()
    roles: Tuple[Role, ...] = ()


@dataclass(frozen=True)
class Decision:
    """Outcome of a single check.

    ``error`` is set when the role, resource or action is unknown; ``allowed``
    is always False in that case.
    """

    allowed: bool
    error: Optional[QueryError] = None

    @property
    def reason(self) -> str:
        if self.error is not None:
            return str(self.error)
        return "allowed" if self.allowed else "denied"

    def raise_for_error(self) -> "Decision":
        if self.error is not None:
            raise self.error
        return self

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True)
class AccessModel:
    """Immutable, query-ready form of a policy.

    ``role_index`` and ``resource_index`` are fixed-size tuples (MAX_ROLES and
    MAX_RESOURCES long) holding sorted names padded with an empty sentinel.
    ``matrix`` holds MAX_ROLES * MAX_ACTIONS resource bitsets; the cell at
    ``role * MAX_ACTIONS + action`` has bit ``resource`` set when access is granted.
    """

    role_index: Tuple[str, ...]
    resource_index: Tuple[str, ...]
    matrix: Tuple[int, ...]
    role_count: int = 0
    resource_count: int = 0
    description: str = field(default="", compare=False)

    def check(self, role: str, resource: str, action: str) -> Decision:
        from .checker import check

        return check(self, role, resource, action)

    def is_allowed(self, role: str, resource: str, action: str) -> bool:
        return self.check(role, resource, action).allowed

    @property
    def roles(self) -> Tuple[str, ...]:
        return self.role_index[: self.role_count]

    @property
    def resources(self) -> Tuple[str, ...]:
        return self.resource_index[: self.resource_count]

    def cell(self, role_slot: int, offset: int) -> int:
        return self.matrix[role_slot * MAX_ACTIONS + offset]

    def iter_cells(self) -> Iterator[Tuple[str, str, int]]:
        """Yield (role, action, bitset) for every populated role slot."""
        for slot, role in enumerate(self.roles):
            for offset, action in enumerate(ACTIONS):
                yield role, action, self.cell(slot, offset)

    def as_dict(self) -> Dict[str, object]:
        return {
            "roles": list(self.roles),
            "resources": list(self.resources),
            "matrix": {
                role: {action: self.cell(slot, off) for off, action in enumerate(ACTIONS)}
                for slot, role in enumerate(self.roles)
            },
        }


__all__ = ["ResourceGrant", "Role", "Policy", "Decision", "AccessModel"]
