"""
Back-office - Information Logs API
"""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db
from backoffice.models import Relevance
from backoffice.schemas import InfoLogCreate, InfoLogUpdate, InfoLogResponse
from backoffice.core import Session
from backoffice.api.auth import get_current_session
from backoffice.services import info_log_service

router = APIRouter(prefix="/logs", tags=["Information Logs"])


@router.get("")
async def search_logs(
    empresa_id: Optional[str] = Query(None),
    contato_id: Optional[str] = Query(None),
    relevancia: Optional[Relevance] = Query(None),
    categoria: Optional[str] = Query(None),
    data_inicio: Optional[datetime] = Query(None),
    data_fim: Optional[datetime] = Query(None),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    logs = await info_log_service.search_logs(
        db,
        empresa_id=empresa_id,
        contato_id=contato_id,
        relevancia=relevancia,
        categoria=categoria,
        data_inicio=data_inicio,
        data_fim=data_fim,
        search=search
    )
    return [log.to_dict() for log in logs]


@router.post("", response_model=InfoLogResponse, status_code=status.HTTP_201_CREATED)
async def create_log(
    payload: InfoLogCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    log = await info_log_service.create_log(db, payload.model_dump(), session)
    return log.to_dict()


@router.get("/{log_id}", response_model=InfoLogResponse)
async def get_log(
    log_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    log = await info_log_service.get_log(db, log_id)
    return log.to_dict()


@router.put("/{log_id}", response_model=InfoLogResponse)
async def update_log(
    log_id: str,
    payload: InfoLogUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    log = await info_log_service.update_log(
        db, log_id, payload.model_dump(exclude_unset=True), session
    )
    return log.to_dict()


@router.delete("/{log_id}")
async def delete_log(
    log_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    await info_log_service.delete_log(db, log_id, session)
    return {"message": "Log excluído"}
