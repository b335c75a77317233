# routers/dashboard.py

import asyncio

from starlette.concurrency import run_in_threadpool
from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect
from typing import Optional

from dependencies.auth import CurrentUser, resolve_actor
from core.permission_helpers import requires_permission, has_permission
from core.supabase_client import get_supabase_client, require_supabase_client
from core.errors import handle_supabase_error
from core.logging_config import logger
from models.dashboard import DashboardStats
from services.dashboard import (
    DashboardAggregator,
    get_dashboard_stats,
    load_scoped_collections,
    recent_activities,
)


router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
)


# -----------------------------------------------------
# GET /dashboard/stats
# -----------------------------------------------------
@router.get("/stats", response_model=DashboardStats, summary="Role-scoped summary counts")
def dashboard_stats(current_user: CurrentUser = Depends(requires_permission("dashboard:read"))):
    client = require_supabase_client()

    try:
        return get_dashboard_stats(client, current_user)
    except Exception as e:
        raise handle_supabase_error(e, "Failed to compute dashboard stats")


# -----------------------------------------------------
# GET /dashboard/activities
# -----------------------------------------------------
@router.get("/activities", summary="Recent activity in the caller's scope")
def dashboard_activities(
    limit: Optional[int] = Query(None, ge=1, le=100),
    current_user: CurrentUser = Depends(requires_permission("activities:read")),
):
    client = require_supabase_client()

    try:
        return {"success": True, "data": recent_activities(client, current_user, limit)}
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch activities")


# -----------------------------------------------------
# WS /dashboard/live?token=...
# Pushes a fresh snapshot on every scoped change.
# -----------------------------------------------------
async def _drain(websocket: WebSocket):
    while True:
        await websocket.receive_text()


@router.websocket("/live")
async def dashboard_live(websocket: WebSocket, token: str = Query(...)):
    client = get_supabase_client()
    if client is None:
        await websocket.close(code=1011)
        return

    try:
        actor = await run_in_threadpool(resolve_actor, client, token)
    except HTTPException as e:
        logger.warning(f"Live dashboard refused: {e.detail}")
        await websocket.close(code=1008)
        return

    if not has_permission(actor, "dashboard:read"):
        await websocket.close(code=1008)
        return

    await websocket.accept()

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    aggregator = DashboardAggregator(loader=lambda: load_scoped_collections(client, actor))
    aggregator.add_listener(lambda snapshot: loop.call_soon_threadsafe(queue.put_nowait, snapshot))
    await run_in_threadpool(aggregator.start)

    receiver = asyncio.create_task(_drain(websocket))
    try:
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)
            if getter not in done:
                getter.cancel()
                logger.debug(f"Live dashboard receiver ended: {receiver.exception()!r}")
                break
            snapshot = getter.result()
            await websocket.send_json(snapshot.model_dump(mode="json"))
    except WebSocketDisconnect:
        logger.debug("Live dashboard client disconnected")
    finally:
        # Unsubscribe on disconnect; late updates are discarded
        aggregator.stop()
        receiver.cancel()
        logger.info(f"Live dashboard closed for {actor.id}")
