"""
Back-office - Information Log Schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any
from datetime import datetime, date, timezone

from backoffice.models.info_log import Relevance
from .company import blank_to_none, reject_null


def parse_occurrence(v: Any) -> Any:
    """Aceita data (YYYY-MM-DD) ou data/hora; armazena UTC sem fuso"""
    if isinstance(v, str) and len(v.strip()) == 10:
        v = f"{v.strip()}T00:00:00"
    if isinstance(v, date) and not isinstance(v, datetime):
        v = datetime(v.year, v.month, v.day)
    if isinstance(v, str):
        try:
            v = datetime.fromisoformat(v.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError("Data de ocorrência inválida")
    if isinstance(v, datetime) and v.tzinfo is not None:
        v = v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


class InfoLogCreate(BaseModel):
    empresa_id: str
    contato_id: Optional[str] = None
    titulo: str = Field(..., min_length=1, max_length=255)
    descricao: str = Field(..., min_length=1)
    relevancia: Relevance = Relevance.MEDIA
    categoria: str = Field(..., min_length=1, max_length=100)
    data_ocorrencia: datetime
    anexos: List[str] = []

    @field_validator("contato_id", mode="before")
    @classmethod
    def empty_contato(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator("data_ocorrencia", mode="before")
    @classmethod
    def check_data_ocorrencia(cls, v: Any) -> Any:
        return parse_occurrence(v)


class InfoLogUpdate(BaseModel):
    contato_id: Optional[str] = None
    titulo: Optional[str] = Field(None, min_length=1, max_length=255)
    descricao: Optional[str] = Field(None, min_length=1)
    relevancia: Optional[Relevance] = None
    categoria: Optional[str] = Field(None, min_length=1, max_length=100)
    data_ocorrencia: Optional[datetime] = None
    anexos: Optional[List[str]] = None

    @field_validator("data_ocorrencia", mode="before")
    @classmethod
    def check_data_ocorrencia(cls, v: Any) -> Any:
        return parse_occurrence(reject_null(v))

    @field_validator("titulo", "descricao", "relevancia", "categoria", mode="before")
    @classmethod
    def required(cls, v: Any) -> Any:
        return reject_null(v)

    @field_validator("contato_id", mode="before")
    @classmethod
    def empty_contato(cls, v: Any) -> Any:
        return blank_to_none(v)


class InfoLogResponse(BaseModel):
    id: str
    empresa_id: str
    contato_id: Optional[str] = None
    titulo: str
    descricao: str
    relevancia: str
    categoria: str
    data_ocorrencia: Optional[str] = None
    data_registro: Optional[str] = None
    anexos: List[str] = []
    created_by: str
    updated_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        from_attributes = True
