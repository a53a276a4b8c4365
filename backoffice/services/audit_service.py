"""
Back-office - Audit Service
Consulta dos registros de auditoria (somente leitura)
"""
from typing import Optional, List, Dict, Any

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import NotFoundError
from backoffice.core.validators import clean_digits
from backoffice.models import AuditRecord, AUDIT_COMPANY_DELETION


async def list_audit(
    db: AsyncSession,
    tipo: Optional[str] = None,
    usuario_id: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 100,
    offset: int = 0
) -> Dict[str, Any]:
    query = select(AuditRecord)

    if tipo:
        query = query.where(AuditRecord.tipo == tipo)
    if usuario_id:
        query = query.where(AuditRecord.usuario_id == usuario_id)
    if search:
        conditions = [
            AuditRecord.empresa_nome.ilike(f"%{search}%"),
            AuditRecord.empresa_id == search,
        ]
        digits = clean_digits(search)
        if digits:
            conditions.append(AuditRecord.empresa_cnpj.contains(digits))
        query = query.where(or_(*conditions))

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0

    result = await db.execute(
        query.order_by(AuditRecord.data_exclusao.desc()).offset(offset).limit(limit)
    )
    records = result.scalars().all()

    return {
        "data": records,
        "has_more": offset + len(records) < total,
        "total": total,
    }


async def list_company_deletions(db: AsyncSession, user_id: Optional[str] = None) -> List[AuditRecord]:
    """Exclusões de empresa, opcionalmente de um usuário"""
    query = select(AuditRecord).where(AuditRecord.tipo == AUDIT_COMPANY_DELETION)
    if user_id:
        query = query.where(AuditRecord.usuario_id == user_id)
    result = await db.execute(query.order_by(AuditRecord.data_exclusao.desc()))
    return list(result.scalars().all())


async def get_audit(db: AsyncSession, audit_id: str) -> AuditRecord:
    result = await db.execute(select(AuditRecord).where(AuditRecord.id == audit_id))
    record = result.scalar_one_or_none()
    if not record:
        raise NotFoundError("Registro de auditoria não encontrado")
    return record
