"""
Back-office - Auth Schemas
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class RegisterRequest(BaseModel):
    email: EmailStr
    # Tamanho minimo conferido no service (erro weak-password)
    password: str
    name: str = Field(..., min_length=2, max_length=255)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: dict


class ReauthenticateRequest(BaseModel):
    """Confirmação de senha antes de operações destrutivas"""
    password: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str
    new_password: str


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


class UserResponse(BaseModel):
    id: str
    email: str
    name: str
    role: str
    telefone: Optional[str] = None
    endereco: Optional[str] = None
    is_active: bool = True
    last_login_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """
    Atualização do perfil do usuário logado.
    A troca de senha é opcional e independente dos dados do perfil.
    """
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    telefone: Optional[str] = Field(None, max_length=20)
    endereco: Optional[str] = Field(None, max_length=500)
    current_password: Optional[str] = None
    new_password: Optional[str] = None
