"""
Back-office - Audit Schemas
"""
from pydantic import BaseModel
from typing import Optional


class AuditResponse(BaseModel):
    id: str
    tipo: str
    empresa_id: str
    empresa_nome: str
    empresa_cnpj: str
    contatos_excluidos: int = 0
    logs_excluidos: int = 0
    usuario_id: str
    usuario_email: str
    data_exclusao: Optional[str] = None
    detalhes: dict = {}

    class Config:
        from_attributes = True


class CompanyDeleteResponse(BaseModel):
    message: str
    audit_id: str
    contatos_excluidos: int
    logs_excluidos: int
