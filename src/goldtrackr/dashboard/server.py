"""
FastAPI server for the GoldTrackr dashboard.

JSON endpoints over the engine state plus a WebSocket that forwards every
engine event to connected clients.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import orjson
import uvicorn
from fastapi import Body, FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from goldtrackr.core.engine import DashboardEngine
from goldtrackr.core.event_bus import Event
from goldtrackr.core.types import CorrelationPeriod


logger = logging.getLogger(__name__)


# =============================================================================
# Request Bodies
# =============================================================================


class PortfolioEntryBody(BaseModel):
    """New holding. Amount and price are validated by the portfolio book."""

    asset_id: str
    amount: Any = None
    buy_price: Any = None


class PortfolioUpdateBody(BaseModel):
    amount: Any = None
    buy_price: Any = None


# =============================================================================
# WebSocket Fan-out
# =============================================================================


class ConnectionHub:
    """Tracks WebSocket clients and broadcasts engine events to them."""

    def __init__(self) -> None:
        self._clients: list[WebSocket] = []

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._clients.append(websocket)
        logger.debug(f"WebSocket client connected ({len(self._clients)} total)")

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._clients:
            self._clients.remove(websocket)

    async def send(self, websocket: WebSocket, event_type: str, data: Any) -> None:
        await websocket.send_text(orjson.dumps({"type": event_type, "data": data}).decode())

    async def broadcast(self, event: Event[Any]) -> None:
        """Send an event to every client, dropping the ones that fail."""
        if not self._clients:
            return

        message = orjson.dumps(
            {"type": event.type.value, "timestamp": event.timestamp, "data": event.payload}
        ).decode()
        disconnected = []
        for client in self._clients:
            try:
                await client.send_text(message)
            except Exception as e:
                logger.debug(f"Dropping WebSocket client: {e}")
                disconnected.append(client)
        for client in disconnected:
            self.disconnect(client)

    @property
    def client_count(self) -> int:
        return len(self._clients)


# =============================================================================
# App Factory
# =============================================================================


def create_app(engine: DashboardEngine, manage_engine: bool = True) -> FastAPI:
    """
    Build the dashboard app.

    Args:
        engine: Engine served by the API.
        manage_engine: Start the engine with the app and shut it down after.

    Returns:
        Configured FastAPI app.
    """
    hub = ConnectionHub()
    engine.event_bus.subscribe_all(hub.broadcast)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if manage_engine:
            await engine.start()
        try:
            yield
        finally:
            engine.event_bus.unsubscribe(None, hub.broadcast)
            if manage_engine:
                await engine.shutdown()

    app = FastAPI(title="GoldTrackr", version="1.0.0", lifespan=lifespan)
    app.state.engine = engine
    app.state.hub = hub

    app.get("/api/prices")(get_prices)
    app.get("/api/correlations")(get_correlations)
    app.get("/api/suggestions")(get_suggestions)
    app.post("/api/suggestions/{suggestion_id}/execute")(execute_suggestion)
    app.get("/api/alerts")(get_alerts)
    app.post("/api/alerts/{alert_id}/dismiss")(dismiss_alert)
    app.delete("/api/alerts")(clear_alerts)
    app.get("/api/portfolio")(get_portfolio)
    app.post("/api/portfolio", status_code=201)(add_portfolio_entry)
    app.patch("/api/portfolio/{entry_id}")(update_portfolio_entry)
    app.delete("/api/portfolio/{entry_id}")(remove_portfolio_entry)
    app.get("/api/preferences")(get_preferences)
    app.patch("/api/preferences")(update_preferences)
    app.get("/api/news")(get_news)
    app.get("/api/status")(get_status)
    app.post("/api/refresh")(refresh)
    app.websocket("/ws")(websocket_endpoint)
    return app


def _engine(request: Request) -> DashboardEngine:
    return request.app.state.engine


# =============================================================================
# Market Data
# =============================================================================


async def get_prices(request: Request) -> dict[str, Any]:
    return _engine(request).snapshot.to_dict()


async def get_correlations(request: Request, period: str = CorrelationPeriod.WEEK.value) -> Any:
    try:
        return _engine(request).correlations(period)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Unknown period: {period}") from e


async def get_news(request: Request) -> list[Any]:
    return _engine(request).news


async def refresh(request: Request) -> dict[str, Any]:
    """Out-of-schedule price refresh, skipped while one is in flight."""
    engine = _engine(request)
    ran = await engine.trigger_price_refresh()
    return {
        "ok": engine.last_refresh_ok,
        "skipped": not ran,
        "last_updated": engine.snapshot.last_updated,
    }


# =============================================================================
# Signals & Execution
# =============================================================================


async def get_suggestions(request: Request) -> list[Any]:
    return list(_engine(request).suggestions)


async def execute_suggestion(request: Request, suggestion_id: str) -> Any:
    result = await _engine(request).execute_suggestion(suggestion_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No suggestion {suggestion_id}")
    return result


async def get_alerts(request: Request, include_dismissed: bool = False) -> list[Any]:
    alerts = _engine(request).alerts
    return alerts.all if include_dismissed else alerts.active


async def dismiss_alert(request: Request, alert_id: str) -> dict[str, Any]:
    return {"dismissed": _engine(request).dismiss_alert(alert_id)}


async def clear_alerts(request: Request) -> dict[str, Any]:
    _engine(request).clear_alerts()
    return {"cleared": True}


# =============================================================================
# Portfolio & Preferences
# =============================================================================


async def get_portfolio(request: Request) -> Any:
    return _engine(request).portfolio_valuation()


async def add_portfolio_entry(request: Request, body: PortfolioEntryBody) -> Any:
    entry = _engine(request).portfolio.add(body.asset_id, body.amount, body.buy_price)
    if entry is None:
        raise HTTPException(status_code=422, detail="Invalid portfolio entry")
    return entry


async def update_portfolio_entry(
    request: Request, entry_id: str, body: PortfolioUpdateBody
) -> Any:
    portfolio = _engine(request).portfolio
    if portfolio.get(entry_id) is None:
        raise HTTPException(status_code=404, detail=f"No portfolio entry {entry_id}")

    entry = portfolio.update(entry_id, amount=body.amount, buy_price=body.buy_price)
    if entry is None:
        raise HTTPException(status_code=422, detail="Invalid portfolio update")
    return entry


async def remove_portfolio_entry(request: Request, entry_id: str) -> dict[str, Any]:
    if not _engine(request).portfolio.remove(entry_id):
        raise HTTPException(status_code=404, detail=f"No portfolio entry {entry_id}")
    return {"removed": entry_id}


async def get_preferences(request: Request) -> dict[str, Any]:
    return _engine(request).preferences.model_dump()


async def update_preferences(
    request: Request, changes: dict[str, Any] = Body(...)
) -> dict[str, Any]:
    updated = _engine(request).update_preferences(changes)
    if updated is None:
        raise HTTPException(status_code=422, detail="Invalid preferences")
    return updated.model_dump()


# =============================================================================
# Status & WebSocket
# =============================================================================


async def get_status(request: Request) -> dict[str, Any]:
    status = _engine(request).status()
    status["websocket_clients"] = request.app.state.hub.client_count
    return status


async def websocket_endpoint(websocket: WebSocket) -> None:
    engine: DashboardEngine = websocket.app.state.engine
    hub: ConnectionHub = websocket.app.state.hub
    await hub.connect(websocket)

    await hub.send(
        websocket,
        "init",
        {
            "prices": engine.snapshot.to_dict(),
            "suggestions": engine.suggestions,
            "alerts": engine.active_alerts,
            "preferences": engine.preferences.model_dump(),
        },
    )

    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg = orjson.loads(data)
            except orjson.JSONDecodeError:
                await hub.send(websocket, "error", {"message": "Invalid JSON"})
                continue

            action = msg.get("action") if isinstance(msg, dict) else None
            if action == "refresh":
                await engine.trigger_price_refresh()
            elif action == "dismiss":
                engine.dismiss_alert(str(msg.get("id", "")))
            else:
                await hub.send(websocket, "error", {"message": f"Unknown action: {action}"})
    except WebSocketDisconnect:
        pass
    finally:
        hub.disconnect(websocket)


async def serve(engine: DashboardEngine, host: str, port: int) -> None:
    """Run the dashboard API until uvicorn exits."""
    config = uvicorn.Config(
        create_app(engine),
        host=host,
        port=port,
        log_level="warning",
        loop="none",
    )
    logger.info(f"Dashboard API on http://{host}:{port}")
    await uvicorn.Server(config).serve()
