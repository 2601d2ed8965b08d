"""Workout session API endpoints."""

from typing import Optional

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from formcoach.registry import LiveSession, RegistryFullError, SessionRegistry, get_registry
from formcoach.schemas.session import (
    FrameIn,
    FrameResult,
    ModeUpdate,
    SessionCreate,
    SessionResponse,
    SessionStats,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_live(session_id: str, registry: SessionRegistry) -> LiveSession:
    live = registry.get(session_id)
    if live is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )
    return live


def _stats(live: LiveSession, now_ms: Optional[float] = None) -> SessionStats:
    return SessionStats(**live.session.get_stats(now_ms).to_dict())


def _process(live: LiveSession, frame: FrameIn) -> FrameResult:
    """Run one frame through the session and collect what it emitted."""
    live.session.process_frame(frame.landmark_dicts(), timestamp_ms=frame.timestamp_ms)
    events = [event.to_dict() for event in live.collector.drain()]
    return FrameResult(events=events, stats=_stats(live, frame.timestamp_ms))


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    body: SessionCreate,
    registry: SessionRegistry = Depends(get_registry)
):
    """Start a workout segment for one exercise."""
    try:
        live = registry.create(body.mode)
    except RegistryFullError as e:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=str(e)
        )
    return SessionResponse(session_id=live.session_id, stats=_stats(live))


@router.get("/{session_id}", response_model=SessionStats)
async def get_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Current count, phase, posture and hold time."""
    return _stats(_get_live(session_id, registry))


@router.post("/{session_id}/frames", response_model=FrameResult)
async def push_frame(
    session_id: str,
    frame: FrameIn,
    registry: SessionRegistry = Depends(get_registry)
):
    """Feed one landmark frame; returns the events it produced."""
    return _process(_get_live(session_id, registry), frame)


@router.put("/{session_id}/mode", response_model=SessionStats)
async def change_mode(
    session_id: str,
    body: ModeUpdate,
    registry: SessionRegistry = Depends(get_registry)
):
    """Switch exercise. Counters and timers start over."""
    live = _get_live(session_id, registry)
    live.session.set_exercise_mode(body.mode)
    live.collector.drain()
    return _stats(live)


@router.post("/{session_id}/reset", response_model=SessionStats)
async def reset_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Zero counters and timers without changing exercise."""
    live = _get_live(session_id, registry)
    live.session.reset()
    live.collector.drain()
    return _stats(live)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def end_session(session_id: str, registry: SessionRegistry = Depends(get_registry)):
    """Discard a session."""
    if not registry.remove(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/{session_id}/stream")
async def stream_frames(
    websocket: WebSocket,
    session_id: str,
    registry: SessionRegistry = Depends(get_registry)
):
    """
    Stream frames over a WebSocket.

    Each text message is a FrameIn payload; each reply is a FrameResult.
    Malformed messages get an error reply and the stream carries on. The
    stream owns its session: when the client disconnects the session ends.
    """
    live = registry.get(session_id)
    if live is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    logger.info(f"Stream opened for session {session_id}")
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = FrameIn.model_validate_json(raw)
            except ValidationError as e:
                await websocket.send_json({"type": "error", "detail": str(e)})
                continue
            live = registry.get(session_id)
            if live is None:
                await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
                return
            result = _process(live, frame)
            await websocket.send_json(result.model_dump())
    except WebSocketDisconnect:
        logger.info(f"Stream closed for session {session_id}")
        registry.remove(session_id, reason="closed with its stream")
