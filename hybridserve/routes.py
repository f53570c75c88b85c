"""Default application routes.

Deployments point the ``ROUTES`` setting at their own ``module:callable``;
this module keeps a bare install answering health probes.
"""

from fastapi import APIRouter, FastAPI

from hybridserve.application.handle import ServerHandle

router = APIRouter(prefix="/api")


@router.get("/healthz", include_in_schema=False)
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


def register_routes(app: FastAPI, handle: ServerHandle) -> None:
    app.include_router(router)
