"""
Back-office - Information Log Model
Registros de informação sobre uma empresa (e opcionalmente um contato)
"""
import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, ForeignKey, JSON

from backoffice.database import Base


class Relevance(str, enum.Enum):
    BAIXA = "baixa"
    MEDIA = "media"
    ALTA = "alta"
    CRITICA = "critica"


class InformationLog(Base):
    """Log de informação"""
    __tablename__ = "logs_informacao"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    empresa_id = Column(String(36), ForeignKey("empresas.id"), nullable=False, index=True)
    contato_id = Column(String(36), ForeignKey("contatos.id", ondelete="SET NULL"), index=True)

    titulo = Column(String(255), nullable=False)
    descricao = Column(Text, nullable=False)
    relevancia = Column(String(20), default=Relevance.MEDIA.value, nullable=False, index=True)
    categoria = Column(String(100), nullable=False, index=True)

    # Quando aconteceu x quando foi registrado no sistema
    data_ocorrencia = Column(DateTime, nullable=False, index=True)
    data_registro = Column(DateTime, default=datetime.utcnow, nullable=False)

    anexos = Column(JSON, default=list)

    created_by = Column(String(36), nullable=False, index=True)
    updated_by = Column(String(36))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "empresa_id": self.empresa_id,
            "contato_id": self.contato_id,
            "titulo": self.titulo,
            "descricao": self.descricao,
            "relevancia": self.relevancia,
            "categoria": self.categoria,
            "data_ocorrencia": self.data_ocorrencia.isoformat() if self.data_ocorrencia else None,
            "data_registro": self.data_registro.isoformat() if self.data_registro else None,
            "anexos": self.anexos or [],
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
