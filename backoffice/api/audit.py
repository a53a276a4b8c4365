"""
Back-office - Audit API
Somente consulta: registros de auditoria não são alterados nem removidos.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db
from backoffice.schemas import AuditResponse
from backoffice.core import Session
from backoffice.api.auth import get_current_session
from backoffice.services import audit_service

router = APIRouter(prefix="/audit", tags=["Audit"])


@router.get("")
async def list_audit(
    tipo: Optional[str] = Query(None),
    usuario_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    page = await audit_service.list_audit(
        db, tipo=tipo, usuario_id=usuario_id, search=search, limit=limit, offset=offset
    )
    return {
        "data": [r.to_dict() for r in page["data"]],
        "has_more": page["has_more"],
        "total": page["total"],
    }


@router.get("/company-deletions")
async def list_company_deletions(
    mine: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    records = await audit_service.list_company_deletions(
        db, session.user_id if mine else None
    )
    return [r.to_dict() for r in records]


@router.get("/{audit_id}", response_model=AuditResponse)
async def get_audit(
    audit_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    record = await audit_service.get_audit(db, audit_id)
    return record.to_dict()
