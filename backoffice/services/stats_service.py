"""
Back-office - CRM Statistics
"""
from collections import Counter
from datetime import datetime, timedelta
from typing import Dict, Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.session import Session
from backoffice.models import Company, Contact, InformationLog

RECENT_DAYS = 30


async def get_crm_stats(db: AsyncSession, session: Session) -> Dict[str, Any]:
    """Números do CRM considerando somente os registros do usuário"""
    empresas = (await db.execute(
        select(Company.estado, Company.created_at).where(Company.created_by == session.user_id)
    )).all()
    contatos = (await db.execute(
        select(Contact.is_principal).where(Contact.created_by == session.user_id)
    )).scalars().all()
    logs = (await db.execute(
        select(InformationLog.relevancia, InformationLog.categoria)
        .where(InformationLog.created_by == session.user_id)
    )).all()

    desde = datetime.utcnow() - timedelta(days=RECENT_DAYS)

    return {
        "total_empresas": len(empresas),
        "total_contatos": len(contatos),
        "total_logs": len(logs),
        "empresas_por_estado": dict(Counter(estado for estado, _ in empresas)),
        "logs_por_relevancia": dict(Counter(relevancia for relevancia, _ in logs)),
        "logs_por_categoria": dict(Counter(categoria for _, categoria in logs)),
        "contatos_principais": sum(1 for principal in contatos if principal),
        "empresas_recentes": sum(1 for _, created in empresas if created and created >= desde),
    }
