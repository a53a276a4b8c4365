"""
Back-office - Process Service
Contratos e histórico. Toda alteração no contrato grava a entrada de
histórico na mesma transação.
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlalchemy import select, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import NotFoundError, ValidationFailed, PersistenceError
from backoffice.core.realtime import broker
from backoffice.core.session import Session
from backoffice.models import Process, ProcessHistory, ProcessStatus, ProcessPriority, HistoryAction
from .persistence import commit_or_raise, check_version

logger = logging.getLogger(__name__)

ORDERABLE_FIELDS = {
    "titulo": Process.titulo,
    "data": Process.data,
    "local": Process.local,
    "status": Process.status,
    "prioridade": Process.prioridade,
    "created_at": Process.created_at,
    "updated_at": Process.updated_at,
}

# updated_by muda em toda edição e não conta como alteração de conteúdo
_IGNORED_FOR_ACTION = {"updated_by"}


def _add_history(
    db: AsyncSession,
    process_id: str,
    action: HistoryAction,
    new_values: dict,
    updated_by: str,
    old_values: Optional[dict] = None,
    notes: Optional[str] = None
) -> ProcessHistory:
    entry = ProcessHistory(
        process_id=process_id,
        action=action.value,
        old_values=old_values,
        new_values=new_values,
        updated_by=updated_by,
        updated_at=datetime.utcnow(),
        notes=notes,
    )
    db.add(entry)
    return entry


def _publish(process_id: str, event: str, history: Optional[ProcessHistory] = None) -> None:
    broker.publish("processes", event, process_id)
    if history is not None:
        broker.publish("process_history", "created", history.id)


async def create_process(db: AsyncSession, data: Dict[str, Any], session: Session) -> Process:
    """Cria contrato e registra a entrada 'created' no histórico"""
    values = {k: (v.value if hasattr(v, "value") else v) for k, v in data.items()}
    values.setdefault("status", ProcessStatus.PENDENTE.value)
    values.setdefault("prioridade", ProcessPriority.MEDIA.value)

    process = Process(
        **values,
        created_by=session.user_id,
        updated_by=session.display_name,
        version=1,
    )
    db.add(process)

    try:
        await db.flush()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Erro ao criar contrato: {e}")
        raise PersistenceError("Erro ao criar contrato")

    history = _add_history(
        db,
        process.id,
        HistoryAction.CREATED,
        new_values=process.to_snapshot(),
        updated_by=session.display_name,
    )
    await commit_or_raise(db, "Erro ao criar contrato")
    await db.refresh(process)

    logger.info(f"Contrato criado: {process.id} por {session.email}")
    _publish(process.id, "created", history)
    return process


async def get_process(db: AsyncSession, process_id: str) -> Process:
    result = await db.execute(select(Process).where(Process.id == process_id))
    process = result.scalar_one_or_none()
    if not process:
        raise NotFoundError("Contrato não encontrado")
    return process


async def list_processes(
    db: AsyncSession,
    status: Optional[str] = None,
    prioridade: Optional[str] = None,
    local: Optional[str] = None,
    responsavel: Optional[str] = None,
    search: Optional[str] = None,
    order_by: str = "updated_at",
    direction: str = "desc",
    limit: int = 50,
    offset: int = 0
) -> Dict[str, Any]:
    """Lista contratos com filtros e paginação: {data, has_more, total}"""
    query = select(Process)

    if status:
        query = query.where(Process.status == status)
    if prioridade:
        query = query.where(Process.prioridade == prioridade)
    if local:
        query = query.where(Process.local == local)
    if responsavel:
        query = query.where(Process.responsavel == responsavel)
    if search:
        query = query.where(
            or_(
                Process.titulo.ilike(f"%{search}%"),
                Process.descricao.ilike(f"%{search}%"),
                Process.local.ilike(f"%{search}%")
            )
        )

    total = await db.scalar(select(func.count()).select_from(query.subquery()))

    column = ORDERABLE_FIELDS.get(order_by, Process.updated_at)
    ordering = column.asc() if direction == "asc" else column.desc()
    query = query.order_by(ordering, Process.id).offset(offset).limit(limit)

    result = await db.execute(query)
    processes = result.scalars().all()

    return {
        "data": processes,
        "has_more": offset + len(processes) < (total or 0),
        "total": total or 0,
    }


async def update_process(
    db: AsyncSession,
    process_id: str,
    data: Dict[str, Any],
    session: Session,
    notes: Optional[str] = None
) -> Process:
    """
    Atualiza contrato e registra histórico com snapshot antigo e novo.
    Quando só o status muda a ação registrada é 'status_changed'.
    """
    process = await get_process(db, process_id)

    data = dict(data)
    check_version(process, data.pop("version", None), "O contrato")

    old_values = process.to_snapshot()

    for field, value in data.items():
        setattr(process, field, value.value if hasattr(value, "value") else value)
    process.updated_by = session.display_name
    process.updated_at = datetime.utcnow()
    process.version = (process.version or 1) + 1

    new_values = process.to_snapshot()
    changed = {
        key for key in new_values
        if key not in _IGNORED_FOR_ACTION and old_values.get(key) != new_values[key]
    }
    action = HistoryAction.STATUS_CHANGED if changed == {"status"} else HistoryAction.UPDATED

    history = _add_history(
        db,
        process.id,
        action,
        new_values=new_values,
        old_values=old_values,
        updated_by=session.display_name,
        notes=notes.strip() if notes and notes.strip() else None,
    )
    await commit_or_raise(db, "Erro ao atualizar contrato")
    await db.refresh(process)

    _publish(process.id, "updated", history)
    return process


async def complete_process(
    db: AsyncSession,
    process_id: str,
    session: Session,
    notes: Optional[str] = None,
    version: Optional[int] = None
) -> Process:
    """Marca o contrato como concluído"""
    return await update_process(
        db, process_id, {"status": ProcessStatus.CONCLUIDO.value, "version": version}, session, notes=notes
    )


async def register_progress(
    db: AsyncSession,
    process_id: str,
    update: Dict[str, Any],
    session: Session
) -> Process:
    """
    Lança andamento: atualiza data/local do contrato (e o número do
    processo, quando montado) e grava a entrada 'progress_update'.
    """
    montou_processo = bool(update.get("montou_processo"))
    numero_processo = (update.get("numero_processo") or "").strip()
    if montou_processo and not numero_processo:
        raise ValidationFailed(
            "Informe o número do processo montado", "numero-processo-required"
        )

    process = await get_process(db, process_id)

    data = update["data"]
    data_value = data.isoformat() if hasattr(data, "isoformat") else data
    local = update["local"].strip()

    process.data = data if hasattr(data, "isoformat") else datetime.strptime(data, "%Y-%m-%d").date()
    process.local = local
    if montou_processo:
        process.numero_processo = numero_processo
    process.updated_by = session.display_name
    process.updated_at = datetime.utcnow()
    process.version = (process.version or 1) + 1

    new_values = {
        "data": data_value,
        "local": local,
        "montou_processo": montou_processo,
    }
    if montou_processo:
        new_values["numero_processo"] = numero_processo

    notes = (update.get("notes") or "").strip()

    history = _add_history(
        db,
        process.id,
        HistoryAction.PROGRESS_UPDATE,
        new_values=new_values,
        old_values={},
        updated_by=session.display_name,
        notes=notes or None,
    )
    await commit_or_raise(db, "Erro ao lançar andamento do contrato")
    await db.refresh(process)

    logger.info(f"Andamento lançado no contrato {process.id} por {session.email}")
    _publish(process.id, "updated", history)
    return process


async def delete_process(db: AsyncSession, process_id: str, session: Session) -> None:
    """Exclui o contrato. O histórico é mantido."""
    process = await get_process(db, process_id)
    await db.delete(process)
    await commit_or_raise(db, "Erro ao excluir contrato")

    logger.info(f"Contrato excluído: {process_id} por {session.email}")
    _publish(process_id, "deleted")


async def get_process_history(db: AsyncSession, process_id: str) -> List[ProcessHistory]:
    """Histórico do contrato, mais recente primeiro"""
    result = await db.execute(
        select(ProcessHistory).where(ProcessHistory.process_id == process_id)
    )
    entries = list(result.scalars().all())
    entries.sort(key=lambda e: e.updated_at or datetime.min, reverse=True)
    return entries


async def get_latest_progress_update(db: AsyncSession, process_id: str) -> Optional[ProcessHistory]:
    result = await db.execute(
        select(ProcessHistory)
        .where(
            ProcessHistory.process_id == process_id,
            ProcessHistory.action == HistoryAction.PROGRESS_UPDATE.value
        )
        .order_by(ProcessHistory.updated_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _completion_times(db: AsyncSession, processes: List[Process]) -> List[float]:
    """Dias entre a criação e a primeira entrada que levou o contrato a concluído"""
    concluded = {p.id: p for p in processes if p.status == ProcessStatus.CONCLUIDO.value}
    if not concluded:
        return []

    result = await db.execute(
        select(ProcessHistory)
        .where(
            ProcessHistory.process_id.in_(list(concluded)),
            ProcessHistory.action.in_([
                HistoryAction.UPDATED.value,
                HistoryAction.STATUS_CHANGED.value
            ])
        )
        .order_by(ProcessHistory.updated_at.asc())
    )

    completed_at = {}
    for entry in result.scalars().all():
        if entry.process_id in completed_at:
            continue
        if (entry.new_values or {}).get("status") == ProcessStatus.CONCLUIDO.value:
            completed_at[entry.process_id] = entry.updated_at

    durations = []
    for process_id, finished in completed_at.items():
        created = concluded[process_id].created_at
        if created and finished:
            durations.append((finished - created).total_seconds() / 86400)
    return durations


async def get_statistics(db: AsyncSession) -> Dict[str, Any]:
    """Estatísticas gerais dos contratos"""
    result = await db.execute(select(Process))
    processes = list(result.scalars().all())

    stats = {
        "total": len(processes),
        **{s.value: 0 for s in ProcessStatus},
        "by_priority": {p.value: 0 for p in ProcessPriority},
        "by_user": {},
        "by_location": {},
        "completion_rate": 0.0,
        "average_completion_time_days": 0.0,
    }

    for process in processes:
        if process.status in stats:
            stats[process.status] += 1
        if process.prioridade in stats["by_priority"]:
            stats["by_priority"][process.prioridade] += 1
        if process.responsavel:
            stats["by_user"][process.responsavel] = stats["by_user"].get(process.responsavel, 0) + 1
        stats["by_location"][process.local] = stats["by_location"].get(process.local, 0) + 1

    if stats["total"]:
        stats["completion_rate"] = round(stats[ProcessStatus.CONCLUIDO.value] / stats["total"] * 100, 2)

    durations = await _completion_times(db, processes)
    if durations:
        stats["average_completion_time_days"] = round(sum(durations) / len(durations), 1)

    return stats
