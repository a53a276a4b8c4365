"""
Back-office - Audit Model
Registro imutável de exclusão de empresa
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Integer, JSON

from backoffice.database import Base

AUDIT_COMPANY_DELETION = "exclusao_empresa"


class AuditRecord(Base):
    """Auditoria de exclusão (somente inserção)"""
    __tablename__ = "auditoria"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    tipo = Column(String(50), default=AUDIT_COMPANY_DELETION, nullable=False, index=True)

    # Empresa excluída (sem FK: a empresa não existe mais)
    empresa_id = Column(String(36), nullable=False, index=True)
    empresa_nome = Column(String(255), nullable=False)
    empresa_cnpj = Column(String(14), nullable=False)

    contatos_excluidos = Column(Integer, default=0, nullable=False)
    logs_excluidos = Column(Integer, default=0, nullable=False)

    usuario_id = Column(String(36), nullable=False, index=True)
    usuario_email = Column(String(255), nullable=False)
    data_exclusao = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Snapshot desnormalizado da empresa excluída
    detalhes = Column(JSON, default=dict)

    def to_dict(self):
        return {
            "id": self.id,
            "tipo": self.tipo,
            "empresa_id": self.empresa_id,
            "empresa_nome": self.empresa_nome,
            "empresa_cnpj": self.empresa_cnpj,
            "contatos_excluidos": self.contatos_excluidos,
            "logs_excluidos": self.logs_excluidos,
            "usuario_id": self.usuario_id,
            "usuario_email": self.usuario_email,
            "data_exclusao": self.data_exclusao.isoformat() if self.data_exclusao else None,
            "detalhes": self.detalhes or {},
        }
