import pathlib

from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Route

from tinyrbac import ModelHolder, load_model
from tinyrbac.adapters.starlette import require_access

holder = ModelHolder(load_model(str(pathlib.Path(__file__).with_name("policy.yaml"))))


def role_of(request):
    return request.headers.get("x-role")


@require_access(holder, "instances", role_of, add_headers=True)
async def instances(request):
    return JSONResponse({"method": request.method, "ok": True})


@require_access(holder, "audit-logs", role_of, unknown_resource_status=404)
async def audit_logs(request):
    return JSONResponse({"entries": []})


app = Starlette(
    routes=[
        Route("/instances", instances, methods=["GET", "POST", "PUT", "PATCH", "DELETE"]),
        Route("/audit-logs", audit_logs),
    ]
)
