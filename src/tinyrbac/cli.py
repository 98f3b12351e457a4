from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from .core.builder import build_from_policy
from .core.errors import BuildError, PolicyDecodeError
from .core.model import AccessModel
from .dsl.validate import schema_errors
from .store.policy_loader import decode_policy, parse_policy_text, read_policy_document

logger = logging.getLogger("tinyrbac.cli")

EXIT_OK = 0
EXIT_INPUT = 1
EXIT_VALIDATION = 2
EXIT_DENIED = 3
EXIT_ENV = 4


def _version() -> str:
    from . import __version__

    return __version__


def _read_document(path: Optional[str]) -> Dict[str, Any]:
    """Read the policy at *path*, or from stdin when no path is given."""
    if path:
        return read_policy_document(path)
    text = sys.stdin.read()
    try:
        return parse_policy_text(text)
    except ValueError as e:
        # JSON first; fall back to YAML for piped YAML documents
        try:
            return parse_policy_text(text, fmt="yaml")
        except ImportError:
            raise PolicyDecodeError(f"unmarshal json config '<stdin>': {e}") from e
        except Exception:
            raise PolicyDecodeError(f"unmarshal config '<stdin>': {e}") from e


def _print(obj: Any, fmt: str) -> None:
    if fmt == "json":
        print(json.dumps(obj, ensure_ascii=False))
    elif isinstance(obj, str):
        print(obj)
    else:
        for item in obj:
            print(item.get("message", item) if isinstance(item, dict) else item)


def _error_entry(err: Exception, kind: str) -> Dict[str, Any]:
    return {"kind": kind, "type": type(err).__name__, "message": str(err)}


def _load(ns: argparse.Namespace) -> tuple[Optional[AccessModel], List[Dict[str, Any]], int]:
    """Read, optionally schema-check, validate and build. Returns (model, errors, rc)."""
    try:
        doc = _read_document(getattr(ns, "policy", None))
    except ImportError as e:
        return None, [_error_entry(e, "env")], EXIT_ENV
    except PolicyDecodeError as e:
        return None, [_error_entry(e, "decode")], EXIT_INPUT

    if getattr(ns, "schema", False):
        try:
            errs = schema_errors(doc)
        except RuntimeError as e:
            return None, [_error_entry(e, "env")], EXIT_ENV
        if errs:
            return None, [dict(e, kind="schema") for e in errs], EXIT_VALIDATION

    try:
        model = build_from_policy(decode_policy(doc))
    except PolicyDecodeError as e:
        return None, [_error_entry(e, "decode")], EXIT_INPUT
    except BuildError as e:
        cause = e.cause if e.cause is not None else e
        return None, [_error_entry(cause, "validation")], EXIT_VALIDATION
    return model, [], EXIT_OK


def cmd_validate(ns: argparse.Namespace) -> int:
    fmt = getattr(ns, "format", "text")
    _model, errs, rc = _load(ns)
    if fmt == "json":
        _print(errs, "json")
    elif errs:
        _print(errs, "text")
    else:
        _print("OK", "text")
    return rc


def cmd_check(ns: argparse.Namespace) -> int:
    fmt = getattr(ns, "format", "text")
    model, errs, rc = _load(ns)
    if model is None:
        _print(errs, fmt)
        return rc

    decision = model.check(ns.role, ns.resource, ns.action)
    if fmt == "json":
        _print(
            {
                "allowed": decision.allowed,
                "error": str(decision.error) if decision.error else None,
            },
            "json",
        )
    else:
        line = "allow" if decision.allowed else "deny"
        if decision.error is not None:
            line = f"{line}: {decision.error}"
        _print(line, "text")
    return EXIT_OK if decision.allowed else EXIT_DENIED


def cmd_dump(ns: argparse.Namespace) -> int:
    model, errs, rc = _load(ns)
    if model is None:
        _print(errs, getattr(ns, "format", "json"))
        return rc
    print(json.dumps(model.as_dict(), indent=2, ensure_ascii=False))
    return EXIT_OK


def _add_policy_args(p: argparse.ArgumentParser, *, default_format: str = "text") -> None:
    p.add_argument("--policy", help="Policy file (JSON or YAML); stdin when omitted")
    p.add_argument(
        "--schema",
        action="store_true",
        help="Also check the document against the JSON schema (requires tinyrbac[validate])",
    )
    p.add_argument("--format", choices=("text", "json"), default=default_format)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyrbac", description="Validate and query tinyrbac access policies"
    )
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    p_validate = sub.add_parser("validate", help="Validate a policy")
    _add_policy_args(p_validate)
    p_validate.set_defaults(func=cmd_validate)

    p_check = sub.add_parser("check", help="Check whether ROLE may ACTION on RESOURCE")
    _add_policy_args(p_check)
    p_check.add_argument("role")
    p_check.add_argument("resource")
    p_check.add_argument("action")
    p_check.set_defaults(func=cmd_check)

    p_dump = sub.add_parser("dump", help="Print the built access model as JSON")
    _add_policy_args(p_dump, default_format="json")
    p_dump.set_defaults(func=cmd_dump)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if ns.version:
        print(f"tinyrbac {_version()}")
        return EXIT_OK

    func = getattr(ns, "func", None)
    if func is None:
        parser.print_help()
        return EXIT_INPUT

    logger.debug("running %s", ns.command)
    rc = func(ns)
    return rc if isinstance(rc, int) else EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
