from __future__ import annotations

from . import core, store
from .core.builder import build_from_policy
from .core.checker import AccessChecker
from .core.errors import (
    BuildError,
    PolicyDecodeError,
    PolicyValidationError,
    QueryError,
    TinyRbacError,
    UnknownResourceError,
    UnknownRoleError,
)
from .core.model import AccessModel, Decision, Policy, ResourceGrant, Role
from .store.policy_loader import (
    decode_policy,
    load_model,
    load_policy,
    new_from_json_config,
    new_from_yaml_config,
)
from .store.reloader import HotReloader, ModelHolder

try:
    from importlib.metadata import PackageNotFoundError, version
except Exception:  # pragma: no cover
    version = None  # type: ignore
    PackageNotFoundError = Exception  # type: ignore


def _detect_version() -> str:
    if version is None:
        return "0.1.0"
    try:
        return version("tinyrbac")
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _detect_version()

__all__ = [
    "AccessChecker",
    "AccessModel",
    "BuildError",
    "Decision",
    "HotReloader",
    "ModelHolder",
    "Policy",
    "PolicyDecodeError",
    "PolicyValidationError",
    "QueryError",
    "ResourceGrant",
    "Role",
    "TinyRbacError",
    "UnknownResourceError",
    "UnknownRoleError",
    "build_from_policy",
    "decode_policy",
    "load_model",
    "load_policy",
    "new_from_json_config",
    "new_from_yaml_config",
    "core",
    "store",
    "__version__",
]
