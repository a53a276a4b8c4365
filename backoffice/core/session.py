"""
Back-office - Sessao autenticada
Valor explicito com a identidade de quem executa a operacao.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Session:
    user_id: str
    email: str
    name: str
    role: str = "admin"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def display_name(self) -> str:
        return self.name or self.email
