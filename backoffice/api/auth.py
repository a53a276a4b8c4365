"""
Back-office - Auth API
Cadastro, login e senhas
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from backoffice.database import get_db
from backoffice.models import User
from backoffice.schemas import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    ReauthenticateRequest,
    PasswordResetRequest,
    PasswordResetConfirm,
    ChangePasswordRequest,
    UserResponse
)
from backoffice.core import settings, verify_access_token, Session
from backoffice.core.rate_limit import limiter
from backoffice.services import auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])
security = HTTPBearer()


async def get_current_session(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Session:
    """Dependency: sessão do usuário autenticado"""
    payload = verify_access_token(credentials.credentials)

    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sessão inválida ou expirada"
        )

    result = await db.execute(
        select(User).where(User.id == payload.get("sub"))
    )
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário não encontrado ou desabilitado"
        )

    return auth_service.session_for(user)


@router.post("/register", response_model=LoginResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Cadastro de usuário (papel sempre admin)"""
    user = await auth_service.register_user(db, payload.email, payload.password, payload.name)
    return LoginResponse(
        access_token=auth_service.issue_token(user),
        token_type="bearer",
        user=user.to_dict()
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(request: Request, payload: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Login com email e senha"""
    user = await auth_service.authenticate(db, payload.email, payload.password)
    return LoginResponse(
        access_token=auth_service.issue_token(user),
        token_type="bearer",
        user=user.to_dict()
    )


@router.post("/logout")
async def logout(session: Session = Depends(get_current_session)):
    """Tokens não têm estado no servidor: o cliente descarta o token"""
    return {"message": "Logout realizado"}


@router.post("/reauthenticate")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def reauthenticate(
    request: Request,
    payload: ReauthenticateRequest,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Confirma a senha atual antes de uma operação destrutiva"""
    await auth_service.reauthenticate(db, session, payload.password)
    return {"ok": True}


@router.post("/password-reset", status_code=status.HTTP_202_ACCEPTED)
async def password_reset(payload: PasswordResetRequest, db: AsyncSession = Depends(get_db)):
    """Envia o link de redefinição de senha"""
    await auth_service.request_password_reset(db, payload.email)
    return {"message": "Enviamos um link de redefinição para o seu email"}


@router.post("/password-reset/confirm")
async def password_reset_confirm(payload: PasswordResetConfirm, db: AsyncSession = Depends(get_db)):
    await auth_service.confirm_password_reset(db, payload.token, payload.new_password)
    return {"message": "Senha redefinida com sucesso"}


@router.post("/change-password")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def change_password(
    request: Request,
    payload: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    await auth_service.change_password(db, session, payload.current_password, payload.new_password)
    return {"message": "Senha alterada com sucesso"}


@router.get("/me", response_model=UserResponse)
async def get_me(
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """Dados do usuário logado"""
    user = await auth_service.get_user(db, session.user_id)
    return user.to_dict()
