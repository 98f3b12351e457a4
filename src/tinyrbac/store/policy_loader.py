from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from ..core.builder import build_from_policy
from ..core.errors import PolicyDecodeError
from ..core.model import AccessModel, Policy, ResourceGrant, Role

logger = logging.getLogger("tinyrbac.store")

Format = Literal["json", "yaml"]

_YAML_EXTS = (".yaml", ".yml")
_YAML_CONTENT_TYPES = ("application/yaml", "application/x-yaml", "text/yaml", "text/x-yaml")


def detect_format(*, filename: Optional[str] = None, content_type: Optional[str] = None) -> Format:
    """Pick a decoder: Content-Type first, then file extension, JSON by default."""
    if content_type:
        ct = content_type.split(";", 1)[0].strip().lower()
        if ct in _YAML_CONTENT_TYPES or ct.endswith("+yaml"):
            return "yaml"
        if ct == "application/json" or ct.endswith("+json"):
            return "json"
    if filename:
        ext = os.path.splitext(filename)[1].lower()
        if ext in _YAML_EXTS:
            return "yaml"
    return "json"


_NULL_RE = re.compile(r"^(?:~|null|Null|NULL|)$")
_loader_cls: Any = None


def _policy_loader(yaml: Any) -> Any:
    """BaseLoader that keeps every scalar a string except plain null/~.

    Names such as 2024, on or 1.0 must stay names, not become int/bool/float.
    """
    global _loader_cls
    if _loader_cls is None:

        class PolicyLoader(yaml.BaseLoader):  # type: ignore[name-defined,misc]
            pass

        PolicyLoader.add_implicit_resolver(
            "tag:yaml.org,2002:null", _NULL_RE, ["~", "n", "N", ""]
        )
        PolicyLoader.add_constructor("tag:yaml.org,2002:null", lambda loader, node: None)
        _loader_cls = PolicyLoader
    return _loader_cls


def _yaml_load(text: str) -> Any:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as e:
        raise ImportError(
            "YAML policies require PyYAML. Install with: pip install tinyrbac[yaml]"
        ) from e
    return yaml.load(text, Loader=_policy_loader(yaml))


def parse_policy_text(
    text: str,
    *,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
    fmt: Optional[Format] = None,
) -> Dict[str, Any]:
    """Parse a JSON or YAML policy document into a plain dict.

    Raises json.JSONDecodeError / yaml.YAMLError on malformed input and ValueError
    when the top level is not a mapping.
    """
    fmt = fmt or detect_format(filename=filename, content_type=content_type)
    if fmt == "yaml":
        data = _yaml_load(text)
        if data is None:
            data = {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"policy document must be a mapping, got {type(data).__name__}")
    return data


# --------------------------------------------------------------------------- #
# Document -> Policy
# --------------------------------------------------------------------------- #


def _field(obj: Mapping[str, Any], name: str, default: Any = None) -> Any:
    # Field names match case-insensitively ("Roles" and "roles" are the same field).
    if name in obj:
        return obj[name]
    for key, value in obj.items():
        if isinstance(key, str) and key.lower() == name:
            return value
    return default


def _strings(value: Any, what: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise PolicyDecodeError(f"invalid policy document: {what} must be a list of strings")
    out: List[str] = []
    for item in value:
        if item is None:
            out.append("")
        elif isinstance(item, str):
            out.append(item)
        else:
            raise PolicyDecodeError(f"invalid policy document: {what} must be a list of strings")
    return tuple(out)


def _mappings(value: Any, what: str) -> List[Mapping[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, Mapping) for v in value):
        raise PolicyDecodeError(f"invalid policy document: {what} must be a list of objects")
    return list(value)


def _text(value: Any, what: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise PolicyDecodeError(f"invalid policy document: {what} must be a string")
    return value


def _decode_role(obj: Mapping[str, Any], i: int) -> Role:
    grants = []
    for j, g in enumerate(_mappings(_field(obj, "resources"), f"roles[{i}].resources")):
        grants.append(
            ResourceGrant(
                resource_name=_text(_field(g, "name"), f"roles[{i}].resources[{j}].name"),
                actions=_strings(_field(g, "actions"), f"roles[{i}].resources[{j}].actions"),
            )
        )
    return Role(
        name=_text(_field(obj, "name"), f"roles[{i}].name"),
        description=_text(_field(obj, "description"), f"roles[{i}].description"),
        resource_grants=tuple(grants),
        position=i,
    )


def decode_policy(document: Mapping[str, Any]) -> Policy:
    """Turn a parsed document into a Policy.

    Missing fields default to empty. Roles sharing a non-empty name collapse the way
    a map would: the first keeps its position, the last one's content wins.
    """
    if not isinstance(document, Mapping):
        raise PolicyDecodeError("invalid policy document: top level must be an object")

    roles: List[Role] = []
    seen: Dict[str, int] = {}
    for i, obj in enumerate(_mappings(_field(document, "roles"), "roles")):
        role = _decode_role(obj, i)
        if role.name and role.name in seen:
            logger.warning("tinyrbac: duplicate role %r, keeping the last definition", role.name)
            roles[seen[role.name]] = role
            continue
        if role.name:
            seen[role.name] = len(roles)
        roles.append(role)

    return Policy(
        description=_text(_field(document, "description"), "description"),
        resources=_strings(_field(document, "resources"), "resources"),
        roles=tuple(roles),
    )


# --------------------------------------------------------------------------- #
# Files
# --------------------------------------------------------------------------- #


def read_policy_document(path: str, *, fmt: Optional[Format] = None) -> Dict[str, Any]:
    """Read and parse the document at *path*, mapping failures to PolicyDecodeError."""
    filetype = fmt or detect_format(filename=path)
    if not path:
        raise PolicyDecodeError("config file path is empty")
    try:
        f = open(path, "r", encoding="utf-8")
    except OSError as e:
        raise PolicyDecodeError(
            f"open {filetype} config {path!r}: {e}", filetype=filetype, path=path
        ) from e
    try:
        with f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise PolicyDecodeError(
            f"read {filetype} config {path!r}: {e}", filetype=filetype, path=path
        ) from e

    try:
        return parse_policy_text(text, fmt=filetype)
    except ImportError:
        raise
    except Exception as e:
        # json.JSONDecodeError, yaml.YAMLError, ValueError (non-mapping top level)
        raise PolicyDecodeError(
            f"unmarshal {filetype} config {path!r}: {e}", filetype=filetype, path=path
        ) from e


def load_policy(path: str, *, fmt: Optional[Format] = None) -> Policy:
    return decode_policy(read_policy_document(path, fmt=fmt))


def load_model(path: str, *, fmt: Optional[Format] = None) -> AccessModel:
    """Read, decode, validate and build the policy at *path*."""
    return build_from_policy(load_policy(path, fmt=fmt))


def new_from_json_config(path: str) -> AccessModel:
    return load_model(path, fmt="json")


def new_from_yaml_config(path: str) -> AccessModel:
    return load_model(path, fmt="yaml")


__all__ = [
    "detect_format",
    "parse_policy_text",
    "decode_policy",
    "read_policy_document",
    "load_policy",
    "load_model",
    "new_from_json_config",
    "new_from_yaml_config",
]
