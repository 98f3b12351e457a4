from __future__ import annotations

from typing import Optional


class TinyRbacError(Exception):
    """Base class for every error raised by tinyrbac."""


# --------------------------------------------------------------------------- #
# Decoding
# --------------------------------------------------------------------------- #


class PolicyDecodeError(TinyRbacError):
    """A policy document could not be located, read or decoded."""

    def __init__(self, message: str, *, filetype: Optional[str] = None, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.filetype = filetype
        self.path = path


# --------------------------------------------------------------------------- #
# Validation (fatal to construction)
# --------------------------------------------------------------------------- #


class PolicyValidationError(TinyRbacError, ValueError):
    """A decoded policy is structurally inconsistent."""


class NoResourcesError(PolicyValidationError):
    def __init__(self) -> None:
        super().__init__("no resources")


class TooManyResourcesError(PolicyValidationError):
    def __init__(self, max: int, actual: int) -> None:
        super().__init__(f"resources exceeded: maximum {max} but config has {actual}")
        self.max = max
        self.actual = actual


class NoRolesError(PolicyValidationError):
    def __init__(self) -> None:
        super().__init__("no roles")


class TooManyRolesError(PolicyValidationError):
    def __init__(self, max: int, actual: int) -> None:
        super().__init__(f"roles exceeded: maximum {max} but config has {actual}")
        self.max = max
        self.actual = actual


class EmptyRoleNameError(PolicyValidationError):
    def __init__(self, index: int) -> None:
        super().__init__(f"empty role: name not defined at index {index}")
        self.index = index


class EmptyRoleResourcesError(PolicyValidationError):
    def __init__(self, role_name: str) -> None:
        super().__init__(f"empty resources: not defined for role {role_name}")
        self.role_name = role_name


class UndefinedResourceError(PolicyValidationError):
    def __init__(self, resource_name: str, role_name: str) -> None:
        super().__init__(
            f"undefined resource: {resource_name} for role {role_name}: "
            f"{resource_name} not defined in resources"
        )
        self.resource_name = resource_name
        self.role_name = role_name


class UnknownActionError(PolicyValidationError):
    """A grant names an action outside the HTTP action table."""

    def __init__(self, action: str, role_name: str) -> None:
        super().__init__(f"unknown action: {action} for role {role_name}")
        self.action = action
        self.role_name = role_name


# --------------------------------------------------------------------------- #
# Construction
# --------------------------------------------------------------------------- #


class BuildError(TinyRbacError):
    """Building an AccessModel failed; no partial model is ever returned."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.cause = cause


class DuplicateRoleError(BuildError):
    def __init__(self, role_name: str) -> None:
        super().__init__(f"duplicate role: {role_name}")
        self.role_name = role_name


# --------------------------------------------------------------------------- #
# Queries (non-fatal, returned inside a Decision)
# --------------------------------------------------------------------------- #


class QueryError(TinyRbacError):
    """A check referenced something the model does not know about."""

    kind = "unknown"

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown {self.kind}: {name}")
        self.name = name


class UnknownRoleError(QueryError):
    kind = "role"


class UnknownResourceError(QueryError):
    kind = "resource"


class UnknownQueryActionError(QueryError):
    kind = "action"


__all__ = [
    "TinyRbacError",
    "PolicyDecodeError",
    "PolicyValidationError",
    "NoResourcesError",
    "TooManyResourcesError",
    "NoRolesError",
    "TooManyRolesError",
    "EmptyRoleNameError",
    "EmptyRoleResourcesError",
    "UndefinedResourceError",
    "UnknownActionError",
    "BuildError",
    "DuplicateRoleError",
    "QueryError",
    "UnknownRoleError",
    "UnknownResourceError",
    "UnknownQueryActionError",
]
