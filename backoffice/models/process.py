"""
Back-office - Process Model
Contratos/processos administrativos e o histórico de alterações
"""
import uuid
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Date, Text, Integer, JSON, Index

from backoffice.database import Base


class ProcessStatus(str, enum.Enum):
    """Status do contrato"""
    PENDENTE = "pendente"
    EM_ANDAMENTO = "em_andamento"
    CONCLUIDO = "concluido"
    CANCELADO = "cancelado"


class ProcessPriority(str, enum.Enum):
    """Prioridade do contrato"""
    BAIXA = "baixa"
    MEDIA = "media"
    ALTA = "alta"


class HistoryAction(str, enum.Enum):
    """Tipos de entrada no histórico"""
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    PROGRESS_UPDATE = "progress_update"


STATUS_LABELS = {
    ProcessStatus.PENDENTE.value: "Pendente",
    ProcessStatus.EM_ANDAMENTO.value: "Em Andamento",
    ProcessStatus.CONCLUIDO.value: "Concluído",
    ProcessStatus.CANCELADO.value: "Cancelado",
}

# Campos que entram nos snapshots do histórico
SNAPSHOT_FIELDS = (
    "titulo",
    "descricao",
    "data",
    "local",
    "status",
    "prioridade",
    "responsavel",
    "numero_processo",
    "updated_by",
)


class Process(Base):
    """Modelo de Contrato"""
    __tablename__ = "processes"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    titulo = Column(String(200), nullable=False, index=True)
    descricao = Column(Text)
    data = Column(Date, nullable=False)
    local = Column(String(255), nullable=False, index=True)

    status = Column(String(20), default=ProcessStatus.PENDENTE.value, nullable=False, index=True)
    prioridade = Column(String(20), default=ProcessPriority.MEDIA.value, nullable=False)

    responsavel = Column(String(255))
    # Preenchido somente quando o processo é montado (ex: "13.548/25")
    numero_processo = Column(String(50))

    created_by = Column(String(36), nullable=False)
    updated_by = Column(String(255))

    # Controle de concorrência otimista
    version = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_snapshot(self) -> dict:
        """Snapshot plano (somente tipos JSON) para o histórico"""
        snapshot = {}
        for field in SNAPSHOT_FIELDS:
            value = getattr(self, field)
            if hasattr(value, "isoformat"):
                value = value.isoformat()
            snapshot[field] = value
        return snapshot

    def to_dict(self):
        return {
            "id": self.id,
            "titulo": self.titulo,
            "descricao": self.descricao,
            "data": self.data.isoformat() if self.data else None,
            "local": self.local,
            "status": self.status,
            "prioridade": self.prioridade,
            "responsavel": self.responsavel,
            "numero_processo": self.numero_processo,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "version": self.version,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class ProcessHistory(Base):
    """Entrada do histórico de um contrato (somente inserção)"""
    __tablename__ = "process_history"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Sem FK: o histórico sobrevive à exclusão do contrato
    process_id = Column(String(36), nullable=False, index=True)
    action = Column(String(30), nullable=False)

    old_values = Column(JSON)
    new_values = Column(JSON, nullable=False, default=dict)

    updated_by = Column(String(255), nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    notes = Column(Text)

    __table_args__ = (
        Index("ix_process_history_process_action", "process_id", "action"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "process_id": self.process_id,
            "action": self.action,
            "old_values": self.old_values,
            "new_values": self.new_values or {},
            "updated_by": self.updated_by,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "notes": self.notes,
        }
