"""
Back-office - Company Model
Empresas do CRM, identificadas pelo CNPJ
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Integer

from backoffice.database import Base
from backoffice.core.validators import format_cnpj


class Company(Base):
    """Modelo de Empresa"""
    __tablename__ = "empresas"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # CNPJ somente com digitos
    cnpj = Column(String(14), unique=True, nullable=False, index=True)
    razao_social = Column(String(255), nullable=False, index=True)
    nome_fantasia = Column(String(255), nullable=False, index=True)

    # Endereço
    logradouro = Column(String(255), nullable=False)
    numero = Column(String(20), nullable=False)
    complemento = Column(String(100))
    bairro = Column(String(100), nullable=False)
    cidade = Column(String(100), nullable=False, index=True)
    estado = Column(String(2), nullable=False, index=True)
    cep = Column(String(9), nullable=False)

    telefone = Column(String(20))
    email = Column(String(255))
    site = Column(String(255))
    observacoes = Column(Text)

    created_by = Column(String(36), nullable=False, index=True)
    updated_by = Column(String(36))

    version = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    ADDRESS_FIELDS = ("logradouro", "numero", "complemento", "bairro", "cidade", "estado", "cep")

    @property
    def endereco(self) -> dict:
        return {field: getattr(self, field) for field in self.ADDRESS_FIELDS}

    def to_dict(self):
        return {
            "id": self.id,
            "cnpj": self.cnpj,
            "cnpj_formatado": format_cnpj(self.cnpj),
            "razao_social": self.razao_social,
            "nome_fantasia": self.nome_fantasia,
            "endereco": self.endereco,
            "telefone": self.telefone,
            "email": self.email,
            "site": self.site,
            "observacoes": self.observacoes,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "version": self.version,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
