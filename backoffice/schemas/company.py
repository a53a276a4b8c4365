"""
Back-office - Company Schemas
CNPJ, CEP, UF e telefone são validados aqui, antes de qualquer acesso ao banco.
"""
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Any

from backoffice.core.validators import (
    clean_digits,
    validate_cnpj,
    validate_cep,
    format_cep,
    validate_phone,
    format_phone,
    validate_uf
)


def blank_to_none(v: Any) -> Any:
    """Campos opcionais de formulario chegam como string vazia"""
    if isinstance(v, str) and not v.strip():
        return None
    return v


def reject_null(v: Any) -> Any:
    """Campos obrigatórios podem ser omitidos numa atualização, mas não anulados"""
    if v is None:
        raise ValueError("Campo obrigatório")
    return v


def normalize_phone(v: Any) -> Optional[str]:
    v = blank_to_none(v)
    if v is None:
        return None
    if not validate_phone(v):
        raise ValueError("Telefone deve ter pelo menos 10 dígitos")
    return format_phone(v)


def normalize_cnpj(v: Any) -> str:
    if not validate_cnpj(v):
        raise ValueError("CNPJ inválido")
    return clean_digits(v)


class EnderecoSchema(BaseModel):
    logradouro: str = Field(..., min_length=1, max_length=255)
    numero: str = Field(..., min_length=1, max_length=20)
    complemento: Optional[str] = Field(None, max_length=100)
    bairro: str = Field(..., min_length=1, max_length=100)
    cidade: str = Field(..., min_length=1, max_length=100)
    estado: str
    cep: str

    @field_validator("complemento", mode="before")
    @classmethod
    def empty_complemento(cls, v: Any) -> Any:
        return blank_to_none(v)

    @field_validator("estado", mode="before")
    @classmethod
    def check_estado(cls, v: Any) -> str:
        uf = str(v or "").strip().upper()
        if not validate_uf(uf):
            raise ValueError("Estado (UF) inválido")
        return uf

    @field_validator("cep", mode="before")
    @classmethod
    def check_cep(cls, v: Any) -> str:
        if not validate_cep(v):
            raise ValueError("CEP deve ter 8 dígitos")
        return format_cep(v)


class CompanyCreate(BaseModel):
    cnpj: str
    razao_social: str = Field(..., min_length=1, max_length=255)
    nome_fantasia: str = Field(..., min_length=1, max_length=255)
    endereco: EnderecoSchema
    telefone: Optional[str] = None
    email: Optional[EmailStr] = None
    site: Optional[str] = Field(None, max_length=255)
    observacoes: Optional[str] = None

    @field_validator("cnpj", mode="before")
    @classmethod
    def check_cnpj(cls, v: Any) -> str:
        return normalize_cnpj(v)

    @field_validator("telefone", mode="before")
    @classmethod
    def check_telefone(cls, v: Any) -> Optional[str]:
        return normalize_phone(v)

    @field_validator("email", "site", "observacoes", mode="before")
    @classmethod
    def empty_optional(cls, v: Any) -> Any:
        return blank_to_none(v)


class CompanyUpdate(BaseModel):
    cnpj: Optional[str] = None
    razao_social: Optional[str] = Field(None, min_length=1, max_length=255)
    nome_fantasia: Optional[str] = Field(None, min_length=1, max_length=255)
    endereco: Optional[EnderecoSchema] = None
    telefone: Optional[str] = None
    email: Optional[EmailStr] = None
    site: Optional[str] = Field(None, max_length=255)
    observacoes: Optional[str] = None
    version: Optional[int] = Field(None, ge=1)

    @field_validator("cnpj", mode="before")
    @classmethod
    def check_cnpj(cls, v: Any) -> str:
        return normalize_cnpj(reject_null(v))

    @field_validator("razao_social", "nome_fantasia", "endereco", mode="before")
    @classmethod
    def required(cls, v: Any) -> Any:
        return reject_null(v)

    @field_validator("telefone", mode="before")
    @classmethod
    def check_telefone(cls, v: Any) -> Optional[str]:
        return normalize_phone(v)

    @field_validator("email", "site", "observacoes", mode="before")
    @classmethod
    def empty_optional(cls, v: Any) -> Any:
        return blank_to_none(v)


class CompanyDeleteRequest(BaseModel):
    """Senha atual do usuário: a exclusão exige reautenticação"""
    password: str = Field(..., min_length=1)


class CompanyResponse(BaseModel):
    id: str
    cnpj: str
    cnpj_formatado: str
    razao_social: str
    nome_fantasia: str
    endereco: dict
    telefone: Optional[str] = None
    email: Optional[str] = None
    site: Optional[str] = None
    observacoes: Optional[str] = None
    created_by: str
    updated_by: Optional[str] = None
    version: int = 1
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        from_attributes = True
