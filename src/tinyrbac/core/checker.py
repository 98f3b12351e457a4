from __future__ import annotations

from typing import Optional, Tuple

from .constants import MAX_ACTIONS, action_offset
from .errors import UnknownQueryActionError, UnknownResourceError, UnknownRoleError
from .model import AccessModel, Decision
from .ports import MetricsSink


def _slot(index: Tuple[str, ...], name: str) -> int:
    # Linear scan over at most MAX_RESOURCES names; the empty sentinel never matches.
    if not name:
        return -1
    for i, candidate in enumerate(index):
        if candidate == name:
            return i
    return -1


def check(model: AccessModel, role: str, resource: str, action: str) -> Decision:
    """Decide whether *role* may perform *action* on *resource*.

    Unknown names never raise: the returned Decision is a denial carrying an
    UnknownRoleError, UnknownResourceError or UnknownQueryActionError.
    """
    role_slot = _slot(model.role_index, role)
    if role_slot < 0:
        return Decision(False, UnknownRoleError(role))

    resource_slot = _slot(model.resource_index, resource)
    if resource_slot < 0:
        return Decision(False, UnknownResourceError(resource))

    offset = action_offset(action)
    if offset is None:
        return Decision(False, UnknownQueryActionError(action))

    cell = model.matrix[role_slot * MAX_ACTIONS + offset]
    return Decision(bool(cell & (1 << resource_slot)))


class AccessChecker:
    """Read-only query front-end for an AccessModel.

    Safe to share between threads: the model is immutable and ``check`` holds no state.
    An optional MetricsSink is told about every outcome.
    """

    def __init__(self, model: AccessModel, *, metrics: Optional[MetricsSink] = None) -> None:
        self.model = model
        self.metrics = metrics

    def check(self, role: str, resource: str, action: str) -> Decision:
        d = check(self.model, role, resource, action)
        if self.metrics is not None:
            if d.error is not None:
                outcome = "error"
            else:
                outcome = "allow" if d.allowed else "deny"
            try:
                self.metrics.inc("tinyrbac_checks_total", {"decision": outcome})
            except Exception:  # pragma: no cover
                # never let metrics break a decision
                pass
        return d

    def is_allowed(self, role: str, resource: str, action: str) -> bool:
        return self.check(role, resource, action).allowed


__all__ = ["check", "AccessChecker"]
