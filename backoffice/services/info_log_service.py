"""
Back-office - Information Log Service
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import NotFoundError, ValidationFailed
from backoffice.core.realtime import broker
from backoffice.core.session import Session
from backoffice.models import InformationLog
from .company_service import get_company
from .contact_service import get_contact
from .persistence import commit_or_raise

logger = logging.getLogger(__name__)


async def _check_contact(db: AsyncSession, empresa_id: str, contato_id: Optional[str]) -> None:
    """Contato informado precisa pertencer à mesma empresa"""
    if not contato_id:
        return
    contact = await get_contact(db, contato_id)
    if contact.empresa_id != empresa_id:
        raise ValidationFailed(
            "O contato informado não pertence a esta empresa", "contact-company-mismatch"
        )


def _plain(value: Any) -> Any:
    return value.value if hasattr(value, "value") else value


async def create_log(db: AsyncSession, data: Dict[str, Any], session: Session) -> InformationLog:
    """Cria log; data_registro é sempre o instante da gravação"""
    await get_company(db, data["empresa_id"])
    await _check_contact(db, data["empresa_id"], data.get("contato_id"))

    values = {k: _plain(v) for k, v in data.items()}
    log = InformationLog(
        **values,
        data_registro=datetime.utcnow(),
        created_by=session.user_id,
        updated_by=session.user_id,
    )
    db.add(log)
    await commit_or_raise(db, "Erro ao criar log de informação")
    await db.refresh(log)

    broker.publish("logs_informacao", "created", log.id)
    return log


async def get_log(db: AsyncSession, log_id: str) -> InformationLog:
    result = await db.execute(select(InformationLog).where(InformationLog.id == log_id))
    log = result.scalar_one_or_none()
    if not log:
        raise NotFoundError("Log de informação não encontrado")
    return log


async def update_log(
    db: AsyncSession,
    log_id: str,
    data: Dict[str, Any],
    session: Session
) -> InformationLog:
    log = await get_log(db, log_id)

    if "contato_id" in data:
        await _check_contact(db, log.empresa_id, data["contato_id"])

    for field, value in data.items():
        setattr(log, field, _plain(value))
    log.updated_by = session.user_id
    log.updated_at = datetime.utcnow()

    await commit_or_raise(db, "Erro ao atualizar log de informação")
    await db.refresh(log)

    broker.publish("logs_informacao", "updated", log.id)
    return log


async def delete_log(db: AsyncSession, log_id: str, session: Session) -> None:
    log = await get_log(db, log_id)
    await db.delete(log)
    await commit_or_raise(db, "Erro ao excluir log de informação")

    logger.info(f"Log de informação excluído: {log_id} por {session.email}")
    broker.publish("logs_informacao", "deleted", log_id)


async def list_by_company(db: AsyncSession, empresa_id: str) -> List[InformationLog]:
    """Logs da empresa, ocorrência mais recente primeiro"""
    result = await db.execute(
        select(InformationLog)
        .where(InformationLog.empresa_id == empresa_id)
        .order_by(InformationLog.data_ocorrencia.desc())
    )
    return list(result.scalars().all())


async def search_logs(
    db: AsyncSession,
    empresa_id: Optional[str] = None,
    contato_id: Optional[str] = None,
    relevancia: Optional[str] = None,
    categoria: Optional[str] = None,
    data_inicio: Optional[datetime] = None,
    data_fim: Optional[datetime] = None,
    search: Optional[str] = None
) -> List[InformationLog]:
    query = select(InformationLog)

    if empresa_id:
        query = query.where(InformationLog.empresa_id == empresa_id)
    if contato_id:
        query = query.where(InformationLog.contato_id == contato_id)
    if relevancia:
        query = query.where(InformationLog.relevancia == _plain(relevancia))
    if categoria:
        query = query.where(InformationLog.categoria == categoria)
    if data_inicio:
        query = query.where(InformationLog.data_ocorrencia >= data_inicio)
    if data_fim:
        query = query.where(InformationLog.data_ocorrencia <= data_fim)
    if search:
        query = query.where(
            or_(
                InformationLog.titulo.ilike(f"%{search}%"),
                InformationLog.descricao.ilike(f"%{search}%"),
                InformationLog.categoria.ilike(f"%{search}%")
            )
        )

    result = await db.execute(query.order_by(InformationLog.data_ocorrencia.desc()))
    return list(result.scalars().all())
