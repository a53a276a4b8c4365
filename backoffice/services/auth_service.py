"""
Back-office - Auth Service
Cadastro, login, reautenticação e senhas. Erros de identidade são
levantados como AuthError(código).
"""
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import settings
from backoffice.core.email import email_service
from backoffice.core.errors import AuthError, NotFoundError
from backoffice.core.realtime import broker
from backoffice.core.security import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_password_reset_token,
    verify_password_reset_token
)
from backoffice.core.session import Session
from backoffice.models import User, UserRole
from .persistence import commit_or_raise

logger = logging.getLogger(__name__)


def session_for(user: User) -> Session:
    return Session(user_id=user.id, email=user.email, name=user.name, role=user.role)


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": user.id, "email": user.email})


def _check_strength(password: str) -> None:
    if len(password or "") < settings.PASSWORD_MIN_LENGTH:
        raise AuthError("weak-password")


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("Usuário não encontrado")
    return user


async def list_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.name))
    return list(result.scalars().all())


async def register_user(db: AsyncSession, email: str, password: str, name: str) -> User:
    """Cadastra usuário; todo cadastro recebe papel admin"""
    _check_strength(password)

    if await get_user_by_email(db, email):
        raise AuthError("email-already-in-use")

    user = User(
        email=email.lower(),
        hashed_password=get_password_hash(password),
        name=name.strip(),
        role=UserRole.ADMIN.value,
    )
    db.add(user)
    await commit_or_raise(db, "Erro ao cadastrar usuário")
    await db.refresh(user)

    logger.info(f"Usuário cadastrado: {user.email}")
    broker.publish("users", "created", user.id)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    if not user:
        raise AuthError("user-not-found")
    if not verify_password(password, user.hashed_password):
        logger.warning(f"Senha incorreta para {email}")
        raise AuthError("wrong-password")
    if not user.is_active:
        raise AuthError("user-disabled")

    user.last_login_at = datetime.utcnow()
    await commit_or_raise(db, "Erro ao registrar login")
    return user


async def reauthenticate(db: AsyncSession, session: Session, password: str) -> None:
    """Confirma a senha atual de quem já está logado"""
    if not password:
        raise AuthError("requires-recent-login")
    user = await get_user(db, session.user_id)
    if not verify_password(password, user.hashed_password):
        logger.warning(f"Reautenticação falhou para {session.email}")
        raise AuthError("wrong-password")


async def request_password_reset(db: AsyncSession, email: str) -> str:
    """Gera token de redefinição e envia por email (quando SMTP configurado)"""
    user = await get_user_by_email(db, email)
    if not user:
        raise AuthError("user-not-found")

    token = create_password_reset_token(user.id, user.hashed_password)
    sent = email_service.send_password_reset_email(user.email, user.name, token)
    if not sent:
        logger.warning(f"Email de redefinição não enviado para {user.email}")
    return token


async def confirm_password_reset(db: AsyncSession, token: str, new_password: str) -> None:
    payload = verify_password_reset_token(token)
    if not payload:
        raise AuthError("invalid-reset-token")

    result = await db.execute(select(User).where(User.id == payload.get("sub")))
    user = result.scalar_one_or_none()
    # token emitido antes da última troca de senha
    if not user or user.hashed_password[-16:] != payload.get("fp"):
        raise AuthError("invalid-reset-token")

    _check_strength(new_password)
    user.hashed_password = get_password_hash(new_password)
    await commit_or_raise(db, "Erro ao redefinir senha")
    logger.info(f"Senha redefinida: {user.email}")


async def change_password(
    db: AsyncSession,
    session: Session,
    current_password: Optional[str],
    new_password: str
) -> None:
    await reauthenticate(db, session, current_password)
    _check_strength(new_password)

    user = await get_user(db, session.user_id)
    user.hashed_password = get_password_hash(new_password)
    await commit_or_raise(db, "Erro ao alterar senha")
    logger.info(f"Senha alterada: {session.email}")


async def update_profile(db: AsyncSession, session: Session, data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Salva os dados do perfil e, se pedido, troca a senha.

    O perfil é gravado primeiro. Se a troca de senha falhar o perfil
    continua salvo e o erro da senha volta separado na resposta.
    """
    data = dict(data)
    current_password = data.pop("current_password", None)
    new_password = data.pop("new_password", None)

    user = await get_user(db, session.user_id)
    for field, value in data.items():
        setattr(user, field, value)
    user.updated_at = datetime.utcnow()
    await commit_or_raise(db, "Erro ao atualizar perfil")
    await db.refresh(user)
    broker.publish("users", "updated", user.id)

    response = {
        "profile_updated": True,
        "password_changed": False,
        "password_error": None,
        "user": user.to_dict(),
    }

    if new_password:
        try:
            await change_password(db, session, current_password, new_password)
        except AuthError as e:
            response["password_error"] = e.message
        else:
            response["password_changed"] = True

    return response
