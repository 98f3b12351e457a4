from __future__ import annotations

from typing import Any, Callable, Optional, ParamSpec, TypeVar, Union

# Optional Starlette JSONResponse
try:
    from starlette.responses import JSONResponse as _ASGIJSONResponse  # type: ignore[import-not-found]
except Exception:  # pragma: no cover
    _ASGIJSONResponse = None  # type: ignore

P = ParamSpec("P")
T = TypeVar("T")

try:
    from starlette.concurrency import run_in_threadpool as run_in_threadpool  # type: ignore[import-not-found]
except Exception:  # pragma: no cover
    async def run_in_threadpool(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
        return func(*args, **kwargs)

# Module-level JSONResponse that tests may monkeypatch
JSONResponse = _ASGIJSONResponse

from ..core.errors import UnknownResourceError

RoleGetter = Callable[[Any], Optional[str]]
ResourceSpec = Union[str, Callable[[Any], str]]


def _deny(reason: str, status_code: int, add_headers: bool):
    if JSONResponse is None:
        raise RuntimeError("JSONResponse is not available; install starlette")  # pragma: no cover
    headers = {"X-TinyRBAC-Reason": reason} if add_headers else None
    return JSONResponse({"detail": reason}, status_code=status_code, headers=headers)


def require_access(
    checker: Any,
    resource: ResourceSpec,
    role_getter: RoleGetter,
    add_headers: bool = False,
    unknown_resource_status: int = 403,
) -> Callable[..., Any]:
    """
    Guard a Starlette endpoint with a tinyrbac check.

    *checker* is anything with ``check(role, resource, action) -> Decision``
    (an AccessModel, AccessChecker or ModelHolder). The HTTP method of the request
    is the action; *resource* is a fixed name or a callable taking the request.

    Works both:
      - as a decorator on an endpoint (returns an async endpoint)
      - as a dependency-like callable: `dep = require_access(...); await dep(request)`
    """

    async def _dependency(request: Any):
        role = role_getter(request)
        if not role:
            return _deny("missing role", 401, add_headers)
        res = resource(request) if callable(resource) else resource
        decision = checker.check(role, res, str(request.method).upper())
        if decision.allowed:
            return None
        status = 403
        if isinstance(decision.error, UnknownResourceError):
            status = unknown_resource_status
        return _deny(decision.reason if decision.error else "Forbidden", status, add_headers)

    def _decorator_or_dependency(arg: Any):
        if callable(arg):
            handler = arg
            is_async = bool(getattr(handler, "__code__", None) and handler.__code__.co_flags & 0x80)

            if is_async:
                async def _endpoint_async(request: Any):
                    deny = await _dependency(request)
                    if deny is not None:
                        return deny
                    return await handler(request)
                return _endpoint_async

            async def _endpoint_sync(request: Any):
                deny = await _dependency(request)
                if deny is not None:
                    return deny
                return await run_in_threadpool(handler, request)
            return _endpoint_sync

        # Otherwise, act as dependency: expect `request` and return a denial response or None.
        return _dependency(arg)

    return _decorator_or_dependency


__all__ = ["require_access"]
