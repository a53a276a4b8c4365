"""
Back-office - Company Service
Empresas do CRM e exclusão com auditoria
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlalchemy import select, delete, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import DomainError, NotFoundError, PersistenceError
from backoffice.core.realtime import broker
from backoffice.core.session import Session
from backoffice.core.validators import clean_digits
from backoffice.models import Company, Contact, InformationLog, AuditRecord, AUDIT_COMPANY_DELETION
from .persistence import commit_or_raise, check_version

logger = logging.getLogger(__name__)


def _flatten(data: Dict[str, Any]) -> Dict[str, Any]:
    """Endereço aninhado -> colunas da tabela empresas"""
    values = dict(data)
    endereco = values.pop("endereco", None)
    if endereco:
        for field in Company.ADDRESS_FIELDS:
            if field in endereco:
                values[field] = endereco[field]
    return values


async def _ensure_unique_cnpj(db: AsyncSession, cnpj: str, exclude_id: Optional[str] = None) -> None:
    query = select(Company.id).where(Company.cnpj == cnpj)
    if exclude_id:
        query = query.where(Company.id != exclude_id)
    if await db.scalar(query):
        raise DomainError("CNPJ já cadastrado", "cnpj-already-registered")


async def create_company(db: AsyncSession, data: Dict[str, Any], session: Session) -> Company:
    values = _flatten(data)
    await _ensure_unique_cnpj(db, values["cnpj"])

    company = Company(
        **values,
        created_by=session.user_id,
        updated_by=session.user_id,
        version=1,
    )
    db.add(company)
    await commit_or_raise(db, "Erro ao criar empresa")
    await db.refresh(company)

    logger.info(f"Empresa criada: {company.id} ({company.cnpj}) por {session.email}")
    broker.publish("empresas", "created", company.id)
    return company


async def get_company(db: AsyncSession, company_id: str) -> Company:
    result = await db.execute(select(Company).where(Company.id == company_id))
    company = result.scalar_one_or_none()
    if not company:
        raise NotFoundError("Empresa não encontrada")
    return company


async def update_company(
    db: AsyncSession,
    company_id: str,
    data: Dict[str, Any],
    session: Session
) -> Company:
    company = await get_company(db, company_id)

    values = _flatten(data)
    check_version(company, values.pop("version", None), "A empresa")

    if values.get("cnpj") and values["cnpj"] != company.cnpj:
        await _ensure_unique_cnpj(db, values["cnpj"], exclude_id=company.id)

    for field, value in values.items():
        setattr(company, field, value)
    company.updated_by = session.user_id
    company.updated_at = datetime.utcnow()
    company.version = (company.version or 1) + 1

    await commit_or_raise(db, "Erro ao atualizar empresa")
    await db.refresh(company)

    broker.publish("empresas", "updated", company.id)
    return company


def _company_filters(query, estado=None, cidade=None, search=None):
    if estado:
        query = query.where(Company.estado == estado.upper())
    if cidade:
        query = query.where(Company.cidade == cidade)
    if search:
        conditions = [
            Company.razao_social.ilike(f"%{search}%"),
            Company.nome_fantasia.ilike(f"%{search}%"),
        ]
        digits = clean_digits(search)
        if digits:
            conditions.append(Company.cnpj.contains(digits))
        query = query.where(or_(*conditions))
    return query


async def list_companies(
    db: AsyncSession,
    estado: Optional[str] = None,
    cidade: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 50,
    offset: int = 0
) -> Dict[str, Any]:
    """Lista empresas, mais recentes primeiro: {data, has_more, total}"""
    query = _company_filters(select(Company), estado, cidade, search)

    total = await db.scalar(select(func.count()).select_from(query.subquery())) or 0

    result = await db.execute(
        query.order_by(Company.updated_at.desc(), Company.id).offset(offset).limit(limit)
    )
    companies = result.scalars().all()

    return {
        "data": companies,
        "has_more": offset + len(companies) < total,
        "total": total,
    }


async def search_companies(
    db: AsyncSession,
    session: Session,
    estado: Optional[str] = None,
    cidade: Optional[str] = None,
    search: Optional[str] = None
) -> List[Company]:
    """Busca restrita às empresas cadastradas pelo usuário"""
    query = select(Company).where(Company.created_by == session.user_id)
    query = _company_filters(query, estado, cidade, search)
    result = await db.execute(query.order_by(Company.updated_at.desc()))
    return list(result.scalars().all())


async def get_company_summary(db: AsyncSession, company_id: str) -> Dict[str, Any]:
    """Empresa e a quantidade de registros que a exclusão removeria"""
    company = await get_company(db, company_id)

    contatos = await db.scalar(
        select(func.count(Contact.id)).where(Contact.empresa_id == company_id)
    )
    logs = await db.scalar(
        select(func.count(InformationLog.id)).where(InformationLog.empresa_id == company_id)
    )

    return {
        "empresa": company.to_dict(),
        "contatos": contatos or 0,
        "logs": logs or 0,
    }


async def delete_company_with_audit(
    db: AsyncSession,
    company_id: str,
    session: Session
) -> AuditRecord:
    """
    Exclui a empresa, seus contatos e logs e grava um registro de auditoria.

    Tudo acontece em uma única transação: ou todos os registros somem e a
    auditoria é criada, ou nada muda. A reautenticação do usuário é feita
    antes, pela rota.
    """
    company = await get_company(db, company_id)

    contatos = (await db.execute(
        select(Contact.id).where(Contact.empresa_id == company_id)
    )).scalars().all()
    logs = (await db.execute(
        select(InformationLog.id).where(InformationLog.empresa_id == company_id)
    )).scalars().all()

    audit = AuditRecord(
        tipo=AUDIT_COMPANY_DELETION,
        empresa_id=company.id,
        empresa_nome=company.nome_fantasia,
        empresa_cnpj=company.cnpj,
        contatos_excluidos=len(contatos),
        logs_excluidos=len(logs),
        usuario_id=session.user_id,
        usuario_email=session.email,
        data_exclusao=datetime.utcnow(),
        detalhes={
            "razao_social": company.razao_social,
            "endereco": company.endereco,
            "telefone": company.telefone,
            "email": company.email,
            "site": company.site,
            "observacoes": company.observacoes,
        },
    )

    try:
        # logs referenciam contatos, contatos referenciam a empresa
        await db.execute(delete(InformationLog).where(InformationLog.empresa_id == company_id))
        await db.execute(delete(Contact).where(Contact.empresa_id == company_id))
        await db.execute(delete(Company).where(Company.id == company_id))
        db.add(audit)
        await db.flush()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Erro ao excluir empresa {company_id}: {e}")
        raise PersistenceError("Erro ao excluir empresa")

    await commit_or_raise(db, "Erro ao excluir empresa")

    logger.info(
        f"Empresa {company_id} excluída por {session.email}: "
        f"{len(contatos)} contatos, {len(logs)} logs (auditoria {audit.id})"
    )

    broker.publish("empresas", "deleted", company_id)
    for contato_id in contatos:
        broker.publish("contatos", "deleted", contato_id)
    for log_id in logs:
        broker.publish("logs_informacao", "deleted", log_id)
    broker.publish("auditoria", "created", audit.id)

    return audit
