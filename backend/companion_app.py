"""Minimal companion receiver for local development.

Accepts the exporter's ``POST /GameData`` payloads, keeps the latest one and
serves a small summary. Useful to check an exporter end to end without the
real companion app.

Usage:
    app = create_app()
    uvicorn.run(app, host="127.0.0.1", port=5500)
"""

import logging
import threading
import time
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, Response
from pydantic import BaseModel

from core.config.export import CONTENT_TYPE, DATA_PATH, DATA_VERSION, DATA_VERSION_HEADER
from core.serializer import ROOT_TAG

logger = logging.getLogger(__name__)


class SnapshotSummary(BaseModel):
    """Summary of the most recently received snapshot."""

    tick: int
    world_seed: str
    includes_maps: bool
    includes_pawns: bool
    regions: int
    colonists: int
    payload_bytes: int
    received_at: float


class HealthResponse(BaseModel):
    status: str
    received: int


@dataclass
class SnapshotStore:
    """Latest payload plus a running count, shared across request handlers."""

    latest_body: Optional[bytes] = None
    latest_summary: Optional[SnapshotSummary] = None
    received: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def put(self, body: bytes, summary: SnapshotSummary) -> None:
        with self._lock:
            self.latest_body = body
            self.latest_summary = summary
            self.received += 1


def summarize(body: bytes) -> SnapshotSummary:
    """Parse a payload just far enough to summarize it.

    Raises:
        ValueError: If the payload is not a snapshot document
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise ValueError(f"malformed XML: {e}") from e
    if root.tag != ROOT_TAG:
        raise ValueError(f"unexpected root element <{root.tag}>")

    def flag(tag: str) -> bool:
        return root.findtext(tag, "false") == "true"

    try:
        tick = int(root.findtext("tick", "0"))
    except ValueError as e:
        raise ValueError(f"bad tick: {e}") from e

    return SnapshotSummary(
        tick=tick,
        world_seed=root.findtext("worldSeed", ""),
        includes_maps=flag("includesMaps"),
        includes_pawns=flag("includesPawns"),
        regions=len(root.findall("maps/MapData")),
        colonists=len(root.findall("colonists/PawnData")),
        payload_bytes=len(body),
        received_at=time.time(),
    )


def create_app(store: Optional[SnapshotStore] = None) -> FastAPI:
    """Create the receiver app.

    Args:
        store: Optional store to share with the caller (tests inspect it)
    """
    store = store if store is not None else SnapshotStore()
    app = FastAPI(title="RimIO Companion Receiver")
    app.state.store = store

    @app.post(DATA_PATH, status_code=204)
    async def receive_game_data(request: Request) -> Response:
        version = request.headers.get(DATA_VERSION_HEADER)
        if version != DATA_VERSION:
            raise HTTPException(status_code=400, detail=f"unsupported data version: {version!r}")
        body = await request.body()
        try:
            summary = summarize(body)
        except ValueError as exc:
            logger.warning("Rejected payload: %s", exc)
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        store.put(body, summary)
        logger.debug("Received tick %d (%d bytes)", summary.tick, summary.payload_bytes)
        return Response(status_code=204)

    @app.get(DATA_PATH + "/latest", response_model=SnapshotSummary)
    async def latest_summary() -> SnapshotSummary:
        if store.latest_summary is None:
            raise HTTPException(status_code=404, detail="no snapshot received yet")
        return store.latest_summary

    @app.get(DATA_PATH + "/latest.xml")
    async def latest_payload() -> Response:
        if store.latest_body is None:
            raise HTTPException(status_code=404, detail="no snapshot received yet")
        return Response(content=store.latest_body, media_type=CONTENT_TYPE)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", received=store.received)

    return app
