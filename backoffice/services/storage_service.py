"""
Back-office - Storage Service
Arquivos gravados em disco (UPLOADS_DIR) e servidos em /uploads.
Cada arquivo tem uma linha em `arquivos` com os metadados.
"""
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.errors import NotFoundError, ValidationFailed, PersistenceError
from backoffice.core.realtime import broker
from backoffice.core.session import Session
from backoffice.models import StoredFile
from .persistence import commit_or_raise

logger = logging.getLogger(__name__)

STORAGE_FOLDERS = ("processes", "avatars", "logs", "temp")


def safe_filename(filename: str) -> str:
    name = Path(filename or "").name
    name = re.sub(r"[^\w.\-]", "_", name)
    return name or "arquivo"


class StorageService:
    """Grava, remove e monta URLs de arquivos"""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.UPLOADS_DIR)
        self.max_size = settings.MAX_FILE_SIZE_MB * 1024 * 1024
        self.allowed_extensions = {ext.lower().lstrip(".") for ext in settings.ALLOWED_EXTENSIONS}

    def _resolve(self, path: str) -> Path:
        """Caminho absoluto, sempre dentro da raiz do storage"""
        base = self.base_dir.resolve()
        target = (base / path).resolve()
        if base != target and base not in target.parents:
            raise ValidationFailed("Caminho de arquivo inválido", "invalid-path")
        return target

    def validate(self, folder: str, filename: str, size: int) -> None:
        if folder not in STORAGE_FOLDERS:
            raise ValidationFailed(f"Pasta inválida: {folder}", "invalid-folder")
        extension = Path(filename or "").suffix.lower().lstrip(".")
        if extension not in self.allowed_extensions:
            raise ValidationFailed(
                f"Tipo de arquivo não permitido: .{extension or '?'}", "invalid-extension"
            )
        if size > self.max_size:
            raise ValidationFailed(
                f"Arquivo excede o limite de {settings.MAX_FILE_SIZE_MB}MB", "file-too-large"
            )

    def url_for(self, path: str) -> str:
        return f"/uploads/{path}"

    async def upload(
        self,
        db: AsyncSession,
        folder: str,
        filename: str,
        content: bytes,
        session: Session,
        entity_id: Optional[str] = None,
        content_type: Optional[str] = None,
        description: Optional[str] = None
    ) -> StoredFile:
        self.validate(folder, filename, len(content))

        timestamp = datetime.utcnow().strftime("%Y%m%d%H%M%S%f")
        parts = [folder, entity_id or session.user_id, f"{timestamp}_{safe_filename(filename)}"]
        relative = "/".join(parts)

        target = self._resolve(relative)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)

        stored = StoredFile(
            path=relative,
            name=filename,
            size=len(content),
            content_type=content_type,
            folder=folder,
            entity_id=entity_id,
            uploaded_by=session.user_id,
            description=description,
        )
        db.add(stored)
        try:
            await commit_or_raise(db, "Erro ao registrar arquivo")
        except PersistenceError:
            # desfaz a gravação em disco
            target.unlink(missing_ok=True)
            raise
        await db.refresh(stored)

        logger.info(f"Arquivo enviado: {relative} ({len(content)} bytes) por {session.email}")
        broker.publish("arquivos", "created", stored.id)
        return stored

    async def delete(self, db: AsyncSession, path: str, session: Session) -> None:
        target = self._resolve(path)
        result = await db.execute(select(StoredFile).where(StoredFile.path == path))
        stored = result.scalar_one_or_none()

        if not stored and not target.exists():
            raise NotFoundError("Arquivo não encontrado")

        if stored:
            await db.delete(stored)
            await commit_or_raise(db, "Erro ao excluir arquivo")
            broker.publish("arquivos", "deleted", stored.id)

        target.unlink(missing_ok=True)
        logger.info(f"Arquivo excluído: {path} por {session.email}")


storage_service = StorageService()
