"""aiohttp ingress: REST endpoints and the observer WebSocket.

Handlers only parse and validate requests; every decision is made by
:class:`~sentinel_rover.coordinator.RoverCoordinator`.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from aiohttp import WSMsgType, web
from pydantic import ValidationError

from sentinel_rover.coordinator import RoverCoordinator
from sentinel_rover.exceptions import ThreatNotFoundError
from sentinel_rover.state.events import EventName

_logger = logging.getLogger(__name__)

COORDINATOR_KEY = web.AppKey("coordinator", RoverCoordinator)

_Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST",
    "Access-Control-Allow-Headers": "Content-Type",
}

_CAMERA_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>Rover Camera Stream</title>
  <style>
    body { margin: 0; background: #000; display: flex; justify-content: center; align-items: center; height: 100vh; }
    #stream { max-width: 100%; max-height: 100%; }
  </style>
</head>
<body>
  <img id="stream" src="/camera/feed" alt="Camera Stream">
  <script>
    setInterval(() => {
      document.getElementById('stream').src = '/camera/feed?' + new Date().getTime();
    }, 100);
  </script>
</body>
</html>
"""


class WebSocketObserver:
    """Observer backed by an aiohttp WebSocket."""

    def __init__(self, ws: web.WebSocketResponse, session_id: str | None = None) -> None:
        self._ws = ws
        self._session_id = session_id or uuid.uuid4().hex

    @property
    def session_id(self) -> str:
        return self._session_id

    async def send(self, message: dict[str, Any]) -> None:
        if self._ws.closed:
            raise ConnectionResetError("websocket closed")
        await self._ws.send_json(message)

    async def close(self) -> None:
        await self._ws.close()


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


@web.middleware
async def error_middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
    """Map malformed input to 400 responses."""
    try:
        return await handler(request)
    except ValidationError as exc:
        details = exc.errors(include_url=False, include_context=False, include_input=False)
        return web.json_response({"success": False, "error": "Invalid request", "details": details}, status=400)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return _error(400, "Request body is not valid JSON")


@web.middleware
async def cors_middleware(request: web.Request, handler: _Handler) -> web.StreamResponse:
    if request.method == "OPTIONS":
        return web.Response(status=204, headers=_CORS_HEADERS)
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers.update(_CORS_HEADERS)
        raise
    if not response.prepared:
        response.headers.update(_CORS_HEADERS)
    return response


async def _read_body(request: web.Request) -> dict[str, Any]:
    """JSON or form-encoded body as a dict; an empty body is ``{}``."""
    if not request.can_read_body:
        return {}
    if request.content_type == "application/x-www-form-urlencoded":
        return dict(await request.post())
    text = await request.text()
    if not text.strip():
        return {}
    body = json.loads(text)
    if not isinstance(body, dict):
        raise web.HTTPBadRequest(
            text=json.dumps({"success": False, "error": "Request body must be a JSON object"}),
            content_type="application/json",
        )
    return body


def _coordinator(request: web.Request) -> RoverCoordinator:
    return request.app[COORDINATOR_KEY]


# ------------------------------------------------------------------
# REST handlers
# ------------------------------------------------------------------


async def health(request: web.Request) -> web.Response:
    return web.json_response(_coordinator(request).health().to_payload())


async def get_status(request: web.Request) -> web.Response:
    return web.json_response(_coordinator(request).get_status().to_payload())


async def update_status(request: web.Request) -> web.Response:
    status = _coordinator(request).update_status(await _read_body(request))
    return web.json_response({"success": True, "status": status.to_payload()})


async def list_threats(request: web.Request) -> web.Response:
    return web.json_response(_coordinator(request).list_threats().to_payload())


async def report_threat(request: web.Request) -> web.Response:
    threat = await _coordinator(request).report_threat(await _read_body(request))
    payload = threat.to_payload()
    return web.json_response({"success": True, "threat": payload, "alerts_sent": payload["alerts_sent"]})


async def neutralize_threat(request: web.Request) -> web.Response:
    try:
        threat = _coordinator(request).neutralize_threat(request.match_info["threat_id"])
    except ThreatNotFoundError:
        return _error(404, "Threat not found")
    return web.json_response({"success": True, "threat": threat.to_payload()})


async def list_alerts(request: web.Request) -> web.Response:
    return web.json_response(_coordinator(request).list_alerts().to_payload())


async def dispatch_alert(request: web.Request) -> web.Response:
    alert = await _coordinator(request).dispatch_alert(await _read_body(request))
    return web.json_response({"success": True, "alert": alert.to_payload()})


async def camera_stream(_request: web.Request) -> web.Response:
    return web.Response(text=_CAMERA_PAGE, content_type="text/html")


async def camera_feed(_request: web.Request) -> web.Response:
    # No camera is attached; the feed is an empty placeholder frame.
    return web.Response(body=b"", content_type="image/jpeg", headers={"Cache-Control": "no-cache"})


# ------------------------------------------------------------------
# WebSocket
# ------------------------------------------------------------------


async def observer_socket(request: web.Request) -> web.WebSocketResponse:
    coordinator = _coordinator(request)
    ws = web.WebSocketResponse(heartbeat=30.0)
    await ws.prepare(request)

    observer = WebSocketObserver(ws)
    coordinator.connect(observer)
    try:
        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                _handle_observer_message(coordinator, observer.session_id, msg.data)
            elif msg.type == WSMsgType.ERROR:
                _logger.debug("WebSocket %s error", observer.session_id, exc_info=ws.exception())
    finally:
        coordinator.disconnect(observer.session_id)
    return ws


def _handle_observer_message(coordinator: RoverCoordinator, session_id: str, raw: str) -> None:
    try:
        message = json.loads(raw)
    except json.JSONDecodeError:
        _logger.debug("Ignoring non-JSON frame from %s", session_id)
        return
    if not isinstance(message, dict):
        _logger.debug("Ignoring non-object frame from %s", session_id)
        return
    event = message.get("event")
    if event == EventName.FIRE_LASER:
        coordinator.fire_laser(session_id, message.get("data"))
        return
    _logger.debug("Ignoring unsupported event %r from %s", event, session_id)


# ------------------------------------------------------------------
# Application factory
# ------------------------------------------------------------------


def create_app(coordinator: RoverCoordinator) -> web.Application:
    """Build the ingress application around *coordinator*.

    The coordinator's simulation drivers start with the application and
    stop on cleanup.
    """
    app = web.Application(middlewares=[cors_middleware, error_middleware])
    app[COORDINATOR_KEY] = coordinator

    async def _coordinator_lifecycle(_app: web.Application) -> AsyncIterator[None]:
        coordinator.start()
        yield
        await coordinator.stop()

    app.cleanup_ctx.append(_coordinator_lifecycle)
    app.router.add_get("/api/health", health)
    app.router.add_get("/api/rover/status", get_status)
    app.router.add_post("/api/rover/status", update_status)
    app.router.add_get("/api/threats", list_threats)
    app.router.add_post("/api/threats", report_threat)
    app.router.add_post("/api/threats/{threat_id}/neutralize", neutralize_threat)
    app.router.add_get("/api/alerts", list_alerts)
    app.router.add_post("/api/alerts/dispatch", dispatch_alert)
    app.router.add_get("/camera/stream", camera_stream)
    app.router.add_get("/camera/feed", camera_feed)
    app.router.add_get("/ws", observer_socket)
    return app
