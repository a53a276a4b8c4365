"""
Back-office - Helpers de persistência compartilhados pelos services
"""
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.errors import ConflictError, PersistenceError

logger = logging.getLogger(__name__)


async def commit_or_raise(db: AsyncSession, error_message: str) -> None:
    """
    Confirma a transação corrente.
    Em caso de falha desfaz tudo e levanta PersistenceError com mensagem fixa.
    """
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"{error_message}: {e}")
        raise PersistenceError(error_message)


def check_version(record, expected: Optional[int], label: str) -> None:
    """Rejeita atualização feita sobre uma versão antiga do registro"""
    if expected is not None and expected != record.version:
        raise ConflictError(
            f"{label} foi alterado por outro usuário. Recarregue e tente novamente"
        )
