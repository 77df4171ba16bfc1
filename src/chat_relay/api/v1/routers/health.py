from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from chat_relay.api.deps import RegistryDep, StoreDep
from chat_relay.application.exceptions import StoreError

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(store: StoreDep, registry: RegistryDep) -> JSONResponse:
    try:
        await store.ping()
    except StoreError as exc:
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "errors": [f"store: {exc.detail}"]},
        )
    return JSONResponse(content={"status": "ready", "connections": len(registry)})
