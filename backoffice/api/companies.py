"""
Back-office - Companies API
Empresas do CRM. A exclusão exige a senha do usuário.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db
from backoffice.schemas import (
    CompanyCreate,
    CompanyUpdate,
    CompanyDeleteRequest,
    CompanyResponse,
    CompanyDeleteResponse
)
from backoffice.core import Session
from backoffice.core.config import settings
from backoffice.core.rate_limit import limiter
from backoffice.api.auth import get_current_session
from backoffice.services import auth_service, company_service, contact_service, info_log_service

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.get("")
async def list_companies(
    estado: Optional[str] = Query(None, max_length=2),
    cidade: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    page = await company_service.list_companies(
        db, estado=estado, cidade=cidade, search=search, limit=limit, offset=offset
    )
    return {
        "data": [c.to_dict() for c in page["data"]],
        "has_more": page["has_more"],
        "total": page["total"],
    }


@router.get("/search")
async def search_companies(
    estado: Optional[str] = Query(None, max_length=2),
    cidade: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Busca entre as empresas cadastradas pelo usuário"""
    companies = await company_service.search_companies(
        db, session, estado=estado, cidade=cidade, search=search
    )
    return [c.to_dict() for c in companies]


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: CompanyCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    company = await company_service.create_company(db, payload.model_dump(), session)
    return company.to_dict()


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(
    company_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    company = await company_service.get_company(db, company_id)
    return company.to_dict()


@router.get("/{company_id}/summary")
async def get_company_summary(
    company_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Empresa e quantos contatos/logs seriam excluídos junto"""
    return await company_service.get_company_summary(db, company_id)


@router.get("/{company_id}/contacts")
async def list_company_contacts(
    company_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    await company_service.get_company(db, company_id)
    contacts = await contact_service.list_by_company(db, company_id)
    return [c.to_dict() for c in contacts]


@router.get("/{company_id}/logs")
async def list_company_logs(
    company_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    await company_service.get_company(db, company_id)
    logs = await info_log_service.list_by_company(db, company_id)
    return [log.to_dict() for log in logs]


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: str,
    payload: CompanyUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    company = await company_service.update_company(
        db, company_id, payload.model_dump(exclude_unset=True), session
    )
    return company.to_dict()


@router.delete("/{company_id}", response_model=CompanyDeleteResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def delete_company(
    request: Request,
    company_id: str,
    payload: CompanyDeleteRequest,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """
    Exclui a empresa com seus contatos e logs e grava a auditoria.
    A senha é conferida antes; se estiver errada nada é excluído.
    """
    await auth_service.reauthenticate(db, session, payload.password)
    audit = await company_service.delete_company_with_audit(db, company_id, session)
    return CompanyDeleteResponse(
        message="Empresa excluída com sucesso",
        audit_id=audit.id,
        contatos_excluidos=audit.contatos_excluidos,
        logs_excluidos=audit.logs_excluidos
    )
