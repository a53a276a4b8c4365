"""
Back-office - Stored File Model
Metadados dos arquivos gravados no storage
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, Text

from backoffice.database import Base


class StoredFile(Base):
    __tablename__ = "arquivos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Caminho relativo à raiz do storage (<pasta>/<entidade>/<timestamp>_<nome>)
    path = Column(String(500), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)
    content_type = Column(String(100))

    folder = Column(String(50), nullable=False)
    entity_id = Column(String(36), index=True)

    uploaded_by = Column(String(36), nullable=False)
    description = Column(Text)
    uploaded_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self, url: str = None):
        return {
            "id": self.id,
            "path": self.path,
            "name": self.name,
            "size": self.size,
            "type": self.content_type,
            "folder": self.folder,
            "entity_id": self.entity_id,
            "uploaded_by": self.uploaded_by,
            "description": self.description,
            "uploaded_at": self.uploaded_at.isoformat() if self.uploaded_at else None,
            "url": url,
        }
