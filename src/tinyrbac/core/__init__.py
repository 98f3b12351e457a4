from __future__ import annotations

from .builder import build_from_policy, build_matrix
from .checker import AccessChecker, check
from .constants import ACTIONS, ALL_RESOURCES, MAX_ACTIONS, MAX_RESOURCES, MAX_ROLES, WILDCARD
from .indexer import assign_indices
from .model import AccessModel, Decision, Policy, ResourceGrant, Role
from .validator import validate_policy

__all__ = [
    "AccessChecker",
    "AccessModel",
    "Decision",
    "Policy",
    "ResourceGrant",
    "Role",
    "assign_indices",
    "build_from_policy",
    "build_matrix",
    "check",
    "validate_policy",
    "ACTIONS",
    "ALL_RESOURCES",
    "MAX_ACTIONS",
    "MAX_RESOURCES",
    "MAX_ROLES",
    "WILDCARD",
]
