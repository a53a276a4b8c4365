"""
Back-office - Processes API
Contratos, andamentos e histórico
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db
from backoffice.schemas import (
    ProcessCreate,
    ProcessUpdate,
    ProcessCompletion,
    ProgressUpdate,
    ProcessResponse,
    ProcessListResponse,
    HistoryEntryResponse
)
from backoffice.core import Session
from backoffice.api.auth import get_current_session
from backoffice.services import process_service
from backoffice.services.history import render_history

router = APIRouter(prefix="/processes", tags=["Processes"])


@router.get("", response_model=ProcessListResponse)
async def list_processes(
    status_filter: Optional[str] = Query(None, alias="status"),
    prioridade: Optional[str] = Query(None),
    local: Optional[str] = Query(None),
    responsavel: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    order_by: str = Query("updated_at"),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Lista contratos com filtros e paginação"""
    page = await process_service.list_processes(
        db,
        status=status_filter,
        prioridade=prioridade,
        local=local,
        responsavel=responsavel,
        search=search,
        order_by=order_by,
        direction=direction,
        limit=limit,
        offset=offset
    )
    return {
        "data": [p.to_dict() for p in page["data"]],
        "has_more": page["has_more"],
        "total": page["total"],
    }


@router.post("", response_model=ProcessResponse, status_code=status.HTTP_201_CREATED)
async def create_process(
    payload: ProcessCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    process = await process_service.create_process(db, payload.model_dump(), session)
    return process.to_dict()


@router.get("/{process_id}", response_model=ProcessResponse)
async def get_process(
    process_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    process = await process_service.get_process(db, process_id)
    return process.to_dict()


@router.put("/{process_id}", response_model=ProcessResponse)
async def update_process(
    process_id: str,
    payload: ProcessUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    data = payload.model_dump(exclude_unset=True)
    notes = data.pop("notes", None)
    process = await process_service.update_process(db, process_id, data, session, notes=notes)
    return process.to_dict()


@router.post("/{process_id}/complete", response_model=ProcessResponse)
async def complete_process(
    process_id: str,
    payload: Optional[ProcessCompletion] = None,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Marca o contrato como concluído"""
    payload = payload or ProcessCompletion()
    process = await process_service.complete_process(
        db, process_id, session, notes=payload.notes, version=payload.version
    )
    return process.to_dict()


@router.post("/{process_id}/progress", response_model=ProcessResponse)
async def register_progress(
    process_id: str,
    payload: ProgressUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Lança um andamento no contrato"""
    process = await process_service.register_progress(db, process_id, payload.model_dump(), session)
    return process.to_dict()


@router.delete("/{process_id}")
async def delete_process(
    process_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    await process_service.delete_process(db, process_id, session)
    return {"message": "Contrato excluído"}


@router.get("/{process_id}/history")
async def get_history(
    process_id: str,
    rendered: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Histórico do contrato, mais recente primeiro"""
    entries = [e.to_dict() for e in await process_service.get_process_history(db, process_id)]
    if rendered:
        return [r.to_dict() for r in render_history(entries)]
    return entries


@router.get("/{process_id}/progress/latest", response_model=Optional[HistoryEntryResponse])
async def get_latest_progress(
    process_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    entry = await process_service.get_latest_progress_update(db, process_id)
    return entry.to_dict() if entry else None
