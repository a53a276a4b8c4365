"""
Back-office - Contact Model
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey

from backoffice.database import Base


class Contact(Base):
    """Contato de uma empresa"""
    __tablename__ = "contatos"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    empresa_id = Column(String(36), ForeignKey("empresas.id"), nullable=False, index=True)

    nome = Column(String(255), nullable=False)
    cargo = Column(String(100))
    departamento = Column(String(100))
    telefone = Column(String(20))
    celular = Column(String(20))
    email = Column(String(255), nullable=False)
    is_principal = Column(Boolean, default=False, nullable=False)
    observacoes = Column(Text)

    created_by = Column(String(36), nullable=False, index=True)
    updated_by = Column(String(36))

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "empresa_id": self.empresa_id,
            "nome": self.nome,
            "cargo": self.cargo,
            "departamento": self.departamento,
            "telefone": self.telefone,
            "celular": self.celular,
            "email": self.email,
            "is_principal": bool(self.is_principal),
            "observacoes": self.observacoes,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
