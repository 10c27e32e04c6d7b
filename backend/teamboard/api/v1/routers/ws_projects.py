from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect
import json
import logging
from typing import Iterable, Optional
from teamboard.core.security import decode_access_token
from teamboard.schemas.events import ChangeEvent
from teamboard.services import RemoteStore, StoreError

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

FEED_TABLES = ("projects",)

def _socket_user_id(ws: WebSocket) -> Optional[str]:
    """Identity id from the `token` query parameter or the accessToken cookie, else None."""
    token = ws.query_params.get("token") or ws.cookies.get("accessToken")
    if not token:
        return None
    try:
        return decode_access_token(token)["sub"]
    except Exception:
        return None

def event_team_ids(event: ChangeEvent) -> set:
    """Teams an event touches: the row's team before and after the change."""
    return {str(row["team_id"]) for row in (event.new, event.old) if row.get("team_id")}

def is_visible(event: ChangeEvent, team_ids: Iterable[str]) -> bool:
    return bool(event_team_ids(event) & set(team_ids))

async def _member_team_ids(store: RemoteStore, user_id: str) -> set:
    memberships = await store.select("team_members", {"user_id": user_id})
    return {str(m["team_id"]) for m in memberships}

@router.websocket("/ws/projects")
async def ws_projects(ws: WebSocket):
    """
    WebSocket endpoint forwarding project change events to a signed-in client.

    Authentication: `?token=<jwt>` or the accessToken cookie.

    Message flow:
    1. Client connects to WebSocket
    2. Client sends: {"type": "subscribe", "table": "projects"}
    3. Server subscribes the socket to the projects change feed
    4. Server sends: {"type": "ready", "table": "projects"}
    5. Server forwards change events of the caller's teams as {"type": "change", "event": {...}}

    Team membership is resolved per event, so joining or leaving a team takes
    effect on the next change. The subscription is released when the connection closes.
    """
    await ws.accept()
    user_id = _socket_user_id(ws)
    if user_id is None:
        await ws.send_text(json.dumps({"type": "error", "message": "AUTH_REQUIRED"}))
        await ws.close(code=1008)
        return

    store = ws.app.state.store
    subscription = None

    async def forward(event: ChangeEvent):
        try:
            team_ids = await _member_team_ids(store, user_id)
        except StoreError as e:
            logger.warning("[ws_projects] membership lookup for %s failed: %s", user_id, e)
            return
        if is_visible(event, team_ids):
            await ws.send_text(json.dumps({"type": "change", "event": event.model_dump(mode="json")}))

    try:
        while True:
            raw = await ws.receive_text()
            msg = json.loads(raw)
            if msg.get("type") == "subscribe":
                table = msg.get("table") or "projects"
                if table not in FEED_TABLES:
                    await ws.send_text(json.dumps({"type": "error", "message": f"table not available: {table}"}))
                    continue
                if subscription is not None:
                    subscription.unsubscribe()
                try:
                    subscription = await store.subscribe(table, forward)
                except StoreError as e:
                    subscription = None
                    await ws.send_text(json.dumps({"type": "error", "message": e.message}))
                    continue
                await ws.send_text(json.dumps({"type": "ready", "table": table}))
            else:
                await ws.send_text(json.dumps({"type": "error", "message": "unknown message type"}))
    except WebSocketDisconnect:
        logger.info("[ws_projects] disconnected")
    except Exception as e:
        logger.warning("[ws_projects] error: %r", e)
    finally:
        if subscription is not None:
            subscription.unsubscribe()
