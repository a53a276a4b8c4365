"""
Back-office - Contact Schemas
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Any

from .company import blank_to_none, normalize_phone, reject_null


class ContactCreate(BaseModel):
    empresa_id: str
    nome: str = Field(..., min_length=1, max_length=255)
    cargo: Optional[str] = Field(None, max_length=100)
    departamento: Optional[str] = Field(None, max_length=100)
    telefone: Optional[str] = None
    celular: Optional[str] = None
    email: EmailStr
    is_principal: bool = False
    observacoes: Optional[str] = None

    @field_validator("telefone", "celular", mode="before")
    @classmethod
    def check_phone(cls, v: Any) -> Optional[str]:
        return normalize_phone(v)

    @field_validator("cargo", "departamento", "observacoes", mode="before")
    @classmethod
    def empty_optional(cls, v: Any) -> Any:
        return blank_to_none(v)


class ContactUpdate(BaseModel):
    nome: Optional[str] = Field(None, min_length=1, max_length=255)
    cargo: Optional[str] = Field(None, max_length=100)
    departamento: Optional[str] = Field(None, max_length=100)
    telefone: Optional[str] = None
    celular: Optional[str] = None
    email: Optional[EmailStr] = None
    is_principal: Optional[bool] = None
    observacoes: Optional[str] = None

    @field_validator("telefone", "celular", mode="before")
    @classmethod
    def check_phone(cls, v: Any) -> Optional[str]:
        return normalize_phone(v)

    @field_validator("nome", "email", "is_principal", mode="before")
    @classmethod
    def required(cls, v: Any) -> Any:
        return reject_null(v)


class ContactResponse(BaseModel):
    id: str
    empresa_id: str
    nome: str
    cargo: Optional[str] = None
    departamento: Optional[str] = None
    telefone: Optional[str] = None
    celular: Optional[str] = None
    email: str
    is_principal: bool = False
    observacoes: Optional[str] = None
    created_by: str
    updated_by: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        from_attributes = True
