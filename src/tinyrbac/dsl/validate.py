from __future__ import annotations

from typing import Any, Dict, List

POLICY_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "tinyrbac policy",
    "type": "object",
    "properties": {
        "description": {"type": "string"},
        "resources": {"type": "array", "items": {"type": ["string", "null"]}},
        "roles": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string"},
                    "description": {"type": "string"},
                    "resources": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "required": ["name"],
                            "properties": {
                                "name": {"type": "string"},
                                "actions": {
                                    "type": "array",
                                    "items": {"type": ["string", "null"]},
                                },
                            },
                        },
                    },
                },
            },
        },
    },
}


def _jsonschema() -> Any:
    try:
        import jsonschema  # type: ignore[import-untyped]
    except ImportError as e:
        raise RuntimeError("Install tinyrbac[validate] to enable schema validation") from e
    return jsonschema


def validate_document(document: Dict[str, Any]) -> None:
    """Validate a raw policy document against POLICY_SCHEMA.

    Raises jsonschema.ValidationError on the first violation, or RuntimeError
    when jsonschema is not installed.
    """
    _jsonschema().validate(instance=document, schema=POLICY_SCHEMA)


def schema_errors(document: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Every schema violation as {"path": ..., "message": ...}, ordered by path."""
    js = _jsonschema()
    validator = js.Draft202012Validator(POLICY_SCHEMA)
    out = []
    for err in sorted(validator.iter_errors(document), key=lambda e: list(map(str, e.path))):
        out.append({"path": "/".join(str(p) for p in err.path), "message": err.message})
    return out


__all__ = ["POLICY_SCHEMA", "validate_document", "schema_errors"]
