"""
Back-office - Export API
Download do relatório de contratos (xlsx) e da auditoria (csv)
"""
from io import BytesIO, StringIO
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db
from backoffice.core import Session
from backoffice.api.auth import get_current_session
from backoffice.services import process_service, audit_service, export_service

router = APIRouter(prefix="/export", tags=["Export"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_PAGE_SIZE = 500


@router.get("/contracts.xlsx")
async def export_contracts(
    status_filter: Optional[str] = Query(None, alias="status"),
    prioridade: Optional[str] = Query(None),
    local: Optional[str] = Query(None),
    responsavel: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Uma aba por contrato, com a linha inicial e os andamentos"""
    items = []
    offset = 0
    while True:
        page = await process_service.list_processes(
            db,
            status=status_filter,
            prioridade=prioridade,
            local=local,
            responsavel=responsavel,
            search=search,
            limit=EXPORT_PAGE_SIZE,
            offset=offset
        )
        for process in page["data"]:
            history = await process_service.get_process_history(db, process.id)
            items.append((process.to_dict(), [h.to_dict() for h in history]))
        if not page["has_more"] or not page["data"]:
            break
        offset += len(page["data"])

    content = export_service.build_contracts_workbook(items)
    filename = export_service.dated_filename("relatorio_contratos", "xlsx")

    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/audit.csv")
async def export_audit(
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Exclusões de empresa em CSV"""
    records = await audit_service.list_company_deletions(db)
    content = export_service.build_audit_csv([r.to_dict() for r in records])
    filename = export_service.dated_filename("auditoria_exclusoes", "csv")

    return StreamingResponse(
        StringIO(content),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
