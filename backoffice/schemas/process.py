"""
Back-office - Process Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any
from datetime import date

from backoffice.models.process import ProcessStatus, ProcessPriority
from backoffice.core.config import settings
from .company import reject_null


class ProcessCreate(BaseModel):
    titulo: str = Field(..., min_length=1, max_length=200)
    descricao: Optional[str] = None
    data: date
    local: str = Field(..., min_length=1, max_length=255)
    status: ProcessStatus = ProcessStatus(settings.DEFAULT_PROCESS_STATUS)
    prioridade: ProcessPriority = ProcessPriority(settings.DEFAULT_PROCESS_PRIORITY)
    responsavel: Optional[str] = Field(None, max_length=255)

    @field_validator("titulo", "local", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class ProcessUpdate(BaseModel):
    titulo: Optional[str] = Field(None, min_length=1, max_length=200)
    descricao: Optional[str] = None
    data: Optional[date] = None
    local: Optional[str] = Field(None, min_length=1, max_length=255)
    status: Optional[ProcessStatus] = None
    prioridade: Optional[ProcessPriority] = None
    responsavel: Optional[str] = Field(None, max_length=255)
    # Observação gravada no histórico junto com a alteração
    notes: Optional[str] = None
    # Versão lida pelo cliente (controle de concorrência otimista)
    version: Optional[int] = Field(None, ge=1)

    @field_validator("titulo", "data", "local", "status", "prioridade", mode="before")
    @classmethod
    def required(cls, v: Any) -> Any:
        v = reject_null(v)
        return v.strip() if isinstance(v, str) else v


class ProcessCompletion(BaseModel):
    """Conclusão do contrato, com observação opcional"""
    notes: Optional[str] = None
    version: Optional[int] = Field(None, ge=1)


class ProgressUpdate(BaseModel):
    """Registro de andamento de um contrato"""
    data: date
    local: str = Field(..., min_length=1, max_length=255)
    montou_processo: bool = False
    numero_processo: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class ProcessResponse(BaseModel):
    id: str
    titulo: str
    descricao: Optional[str] = None
    data: Optional[str] = None
    local: str
    status: str
    prioridade: str
    responsavel: Optional[str] = None
    numero_processo: Optional[str] = None
    created_by: str
    updated_by: Optional[str] = None
    version: int = 1
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        from_attributes = True


class ProcessListResponse(BaseModel):
    data: List[ProcessResponse]
    has_more: bool
    total: int


class HistoryEntryResponse(BaseModel):
    id: str
    process_id: str
    action: str
    old_values: Optional[dict] = None
    new_values: dict = {}
    updated_by: str
    updated_at: Optional[str] = None
    notes: Optional[str] = None

    class Config:
        from_attributes = True
