#!/usr/bin/env python3
"""
web/server.py — FastAPI JSON server for marble race tables.

Run:
  python -m web.server

LAN:
  MARBLES_HOST=0.0.0.0 python -m web.server
  uvicorn web.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

import legality
import split_moves
import turns
from board import Seat
from errors import MoveRejected

from . import engine_ui
from .config import LOG_FORMAT, load_settings
from .game_manager import GameManager, TableSession
from .models import CompleteMoveRequest, CreateTableRequest, DiscardRequest, PartialMoveRequest, PlayRequest
from .views import build_seat_view

settings = load_settings()

# Configure logging
logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Marble Race",
    description="Four seats, two teams, one 72-cell track",
    version="0.1.0",
)
gm = GameManager()


# -----------------------------
# Error mapping
# -----------------------------
@app.exception_handler(MoveRejected)
def move_rejected_handler(request: Request, exc: MoveRejected) -> JSONResponse:
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=409, content=exc.to_dict())


@app.exception_handler(ValueError)
def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    logger.warning("Bad request %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"code": "BAD_REQUEST", "message": str(exc), "context": {}})


def _session(table_id: str) -> TableSession:
    sess = gm.get_table(table_id)
    if sess is None:
        raise HTTPException(status_code=404, detail=f"Unknown table: {table_id}")
    return sess


def _respond(sess: TableSession, seat: Seat, result: Dict[str, Any]) -> Dict[str, Any]:
    with sess.lock:
        view = build_seat_view(sess, seat)
    return {"ok": True, "result": result, "view": view}


# -----------------------------
# Tables
# -----------------------------
@app.get("/health")
def health_check() -> Dict[str, Any]:
    return {"status": "healthy", "tables": len(gm)}


@app.post("/tables")
def create_table(body: Optional[CreateTableRequest] = None) -> Dict[str, Any]:
    body = body or CreateTableRequest()
    sess = gm.create_table(starting_seat=body.starting_seat, seed=body.seed)
    with sess.lock:
        view = build_seat_view(sess, None)
    return {"table_id": sess.table_id, "view": view}


@app.get("/tables/{table_id}")
def get_table(table_id: str, seat: Optional[Seat] = None) -> Dict[str, Any]:
    sess = _session(table_id)
    with sess.lock:
        return build_seat_view(sess, seat)


@app.delete("/tables/{table_id}")
def delete_table(table_id: str) -> Dict[str, Any]:
    if not gm.drop_table(table_id):
        raise HTTPException(status_code=404, detail=f"Unknown table: {table_id}")
    logger.info("Table %s closed", table_id)
    return {"ok": True, "table_id": table_id}


# -----------------------------
# Actions
# -----------------------------
@app.post("/tables/{table_id}/play")
def post_play(table_id: str, body: PlayRequest) -> Dict[str, Any]:
    sess = _session(table_id)
    result = engine_ui.apply_action(sess, "play", body)
    return _respond(sess, body.seat, result)


@app.post("/tables/{table_id}/partial")
def post_partial(table_id: str, body: PartialMoveRequest) -> Dict[str, Any]:
    sess = _session(table_id)
    result = engine_ui.apply_action(sess, "partial", body)
    return _respond(sess, body.seat, result)


@app.post("/tables/{table_id}/complete")
def post_complete(table_id: str, body: CompleteMoveRequest) -> Dict[str, Any]:
    sess = _session(table_id)
    result = engine_ui.apply_action(sess, "complete", body)
    return _respond(sess, body.seat, result)


@app.post("/tables/{table_id}/discard")
def post_discard(table_id: str, body: DiscardRequest) -> Dict[str, Any]:
    sess = _session(table_id)
    result = engine_ui.apply_action(sess, "discard", body)
    return _respond(sess, body.seat, result)


# -----------------------------
# Queries
# -----------------------------
@app.get("/tables/{table_id}/destinations")
def get_destinations(
    table_id: str,
    seat: Seat,
    marble_id: int = Query(ge=0, le=4),
    card_index: Optional[int] = Query(None, ge=0),
    owner: Optional[Seat] = None,
) -> Dict[str, Any]:
    """
    Cells the marble can reach with the card at `card_index`.
    Without `card_index`, the second leg of the seat's pending split.
    """
    sess = _session(table_id)
    with sess.lock:
        state = sess.state
        if card_index is None:
            turns.require_turn(state, seat)
            if split_moves.pending_for(state, seat) is None:
                raise ValueError("card_index is required when no split is pending")
            cells = legality.completion_destinations(state, seat, owner or seat, marble_id)
        else:
            hand = state["hands"][seat]
            if card_index >= len(hand):
                raise ValueError(f"No card at index {card_index}")
            cells = turns.legal_destinations(state, seat, hand[card_index]["value"], marble_id, owner=owner)

    return {
        "seat": seat,
        "marble_id": marble_id,
        "owner": owner or seat,
        "destinations": [{"location": loc, "position": pos} for loc, pos in sorted(cells)],
    }


@app.get("/tables/{table_id}/legal")
def get_legal(table_id: str, seat: Seat) -> Dict[str, Any]:
    sess = _session(table_id)
    with sess.lock:
        has_play = turns.has_legal_play(sess.state, seat)
        playable = [card["card_index"] for card in engine_ui.playable_cards(sess.state, seat) if card["playable"]]
    return {"seat": seat, "has_legal_play": has_play, "playable_cards": playable}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("web.server:app", host=settings.host, port=settings.port, reload=settings.reload)
