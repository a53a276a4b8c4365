"""
Back-office - Statistics API
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db
from backoffice.core import Session
from backoffice.api.auth import get_current_session
from backoffice.services import process_service, stats_service

router = APIRouter(prefix="/stats", tags=["Statistics"])


@router.get("/processes")
async def get_process_stats(
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Totais por status, prioridade, responsável e local"""
    return await process_service.get_statistics(db)


@router.get("/crm")
async def get_crm_stats(
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Números do CRM do usuário logado"""
    return await stats_service.get_crm_stats(db, session)
