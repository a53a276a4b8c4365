"""
Back-office - Files API
Upload e remoção de arquivos (anexos de contratos e logs, avatares)
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db
from backoffice.core import Session
from backoffice.api.auth import get_current_session
from backoffice.services.storage_service import storage_service

router = APIRouter(prefix="/files", tags=["Files"])


@router.post("/{folder}", status_code=status.HTTP_201_CREATED)
async def upload_file(
    folder: str,
    file: UploadFile = File(...),
    entity_id: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    content = await file.read()
    stored = await storage_service.upload(
        db,
        folder,
        file.filename,
        content,
        session,
        entity_id=entity_id,
        content_type=file.content_type,
        description=description
    )
    return stored.to_dict(url=storage_service.url_for(stored.path))


@router.delete("")
async def delete_file(
    path: str = Query(..., min_length=1),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    await storage_service.delete(db, path, session)
    return {"message": "Arquivo excluído"}


@router.get("/url")
async def get_file_url(
    path: str = Query(..., min_length=1),
    session: Session = Depends(get_current_session)
):
    return {"path": path, "url": storage_service.url_for(path)}
