"""
Back-office - Domain Errors
Erros de dominio convertidos em respostas HTTP pelos handlers do main
"""
from typing import Optional


# Mensagens exibidas ao usuario para erros do provedor de identidade
AUTH_ERROR_MESSAGES = {
    "user-not-found": "Usuário não encontrado",
    "wrong-password": "Senha incorreta",
    "invalid-email": "Email inválido",
    "user-disabled": "Usuário desabilitado",
    "too-many-requests": "Muitas tentativas. Tente novamente mais tarde",
    "email-already-in-use": "Este email já está em uso",
    "weak-password": "Senha muito fraca. Use pelo menos 6 caracteres",
    "requires-recent-login": "Por segurança, informe sua senha atual novamente",
    "invalid-token": "Sessão inválida ou expirada",
    "invalid-reset-token": "Link de redefinição inválido ou expirado",
}

AUTH_ERROR_STATUS = {
    "user-not-found": 404,
    "wrong-password": 401,
    "invalid-email": 400,
    "user-disabled": 403,
    "too-many-requests": 429,
    "email-already-in-use": 400,
    "weak-password": 400,
    "requires-recent-login": 401,
    "invalid-token": 401,
    "invalid-reset-token": 400,
}


class DomainError(Exception):
    """Erro base da aplicacao"""
    status_code = 400
    code = "domain-error"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class NotFoundError(DomainError):
    status_code = 404
    code = "not-found"


class ConflictError(DomainError):
    """Atualizacao contra uma versao desatualizada do registro"""
    status_code = 409
    code = "version-conflict"


class ValidationFailed(DomainError):
    status_code = 400
    code = "validation-error"


class PersistenceError(DomainError):
    """Falha ao gravar/ler no banco; mensagem fixa para o usuario"""
    status_code = 500
    code = "persistence-error"


class AddressLookupError(DomainError):
    status_code = 502
    code = "address-lookup-error"


class AuthError(DomainError):
    """Erro do provedor de identidade, identificado por codigo"""

    def __init__(self, code: str):
        super().__init__(AUTH_ERROR_MESSAGES.get(code, "Erro de autenticação"), code)
        self.status_code = AUTH_ERROR_STATUS.get(code, 400)
