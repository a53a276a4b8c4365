"""
Back-office - Realtime API
Eventos de alteração via Server-Sent Events
"""
import asyncio
import json
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import StreamingResponse

from backoffice.core import Session
from backoffice.core.realtime import broker, COLLECTIONS
from backoffice.api.auth import get_current_session

router = APIRouter(prefix="/stream", tags=["Realtime"])

KEEPALIVE_SECONDS = 15


def format_event(message: dict) -> str:
    return f"event: {message['event']}\ndata: {json.dumps(message)}\n\n"


async def event_stream(request: Request, collection: str, queue: asyncio.Queue, keepalive: float = KEEPALIVE_SECONDS):
    """Repassa os eventos da fila até o cliente desconectar"""
    try:
        yield f": conectado a {collection}\n\n"
        while not await request.is_disconnected():
            try:
                message = await asyncio.wait_for(queue.get(), timeout=keepalive)
            except asyncio.TimeoutError:
                yield ": keepalive\n\n"
                continue
            yield format_event(message)
    finally:
        broker.unsubscribe(collection, queue)


@router.get("/{collection}")
async def stream_collection(
    collection: str,
    request: Request,
    session: Session = Depends(get_current_session)
):
    """Clientes recarregam a lista ao receber um evento"""
    if collection not in COLLECTIONS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Coleção desconhecida"
        )

    queue = broker.subscribe(collection)
    return StreamingResponse(
        event_stream(request, collection, queue),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"}
    )
