"""
Back-office - Contact Service
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlalchemy import select, update, or_
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import NotFoundError
from backoffice.core.realtime import broker
from backoffice.core.session import Session
from backoffice.models import Contact, InformationLog
from .company_service import get_company
from .persistence import commit_or_raise

logger = logging.getLogger(__name__)


async def create_contact(db: AsyncSession, data: Dict[str, Any], session: Session) -> Contact:
    # Não há regra de contato principal único por empresa
    await get_company(db, data["empresa_id"])

    contact = Contact(
        **data,
        created_by=session.user_id,
        updated_by=session.user_id,
    )
    db.add(contact)
    await commit_or_raise(db, "Erro ao criar contato")
    await db.refresh(contact)

    broker.publish("contatos", "created", contact.id)
    return contact


async def get_contact(db: AsyncSession, contact_id: str) -> Contact:
    result = await db.execute(select(Contact).where(Contact.id == contact_id))
    contact = result.scalar_one_or_none()
    if not contact:
        raise NotFoundError("Contato não encontrado")
    return contact


async def update_contact(
    db: AsyncSession,
    contact_id: str,
    data: Dict[str, Any],
    session: Session
) -> Contact:
    contact = await get_contact(db, contact_id)

    for field, value in data.items():
        setattr(contact, field, value)
    contact.updated_by = session.user_id
    contact.updated_at = datetime.utcnow()

    await commit_or_raise(db, "Erro ao atualizar contato")
    await db.refresh(contact)

    broker.publish("contatos", "updated", contact.id)
    return contact


async def delete_contact(db: AsyncSession, contact_id: str, session: Session) -> None:
    """Exclui o contato; os logs que o citavam continuam na empresa, sem contato"""
    contact = await get_contact(db, contact_id)

    result = await db.execute(
        select(InformationLog.id).where(InformationLog.contato_id == contact_id)
    )
    log_ids = list(result.scalars().all())
    if log_ids:
        await db.execute(
            update(InformationLog)
            .where(InformationLog.id.in_(log_ids))
            .values(contato_id=None, updated_by=session.user_id, updated_at=datetime.utcnow())
            .execution_options(synchronize_session="fetch")
        )

    await db.delete(contact)
    await commit_or_raise(db, "Erro ao excluir contato")

    logger.info(f"Contato excluído: {contact_id} por {session.email} ({len(log_ids)} logs desvinculados)")
    broker.publish("contatos", "deleted", contact_id)
    for log_id in log_ids:
        broker.publish("logs_informacao", "updated", log_id)


async def list_by_company(db: AsyncSession, empresa_id: str) -> List[Contact]:
    """Contatos da empresa: principal primeiro, depois por nome"""
    result = await db.execute(
        select(Contact)
        .where(Contact.empresa_id == empresa_id)
        .order_by(Contact.is_principal.desc(), Contact.nome.asc())
    )
    return list(result.scalars().all())


async def search_contacts(
    db: AsyncSession,
    empresa_id: Optional[str] = None,
    departamento: Optional[str] = None,
    is_principal: Optional[bool] = None,
    search: Optional[str] = None
) -> List[Contact]:
    query = select(Contact)

    if empresa_id:
        query = query.where(Contact.empresa_id == empresa_id)
    if departamento:
        query = query.where(Contact.departamento == departamento)
    if is_principal is not None:
        query = query.where(Contact.is_principal == is_principal)
    if search:
        query = query.where(
            or_(
                Contact.nome.ilike(f"%{search}%"),
                Contact.email.ilike(f"%{search}%"),
                Contact.cargo.ilike(f"%{search}%"),
                Contact.departamento.ilike(f"%{search}%")
            )
        )

    result = await db.execute(query.order_by(Contact.nome.asc()))
    return list(result.scalars().all())
