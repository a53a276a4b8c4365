"""
Back-office - Users API
"""
from typing import List
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db
from backoffice.schemas import UserResponse, ProfileUpdate
from backoffice.core import Session, settings
from backoffice.core.rate_limit import limiter
from backoffice.api.auth import get_current_session
from backoffice.services import auth_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    users = await auth_service.list_users(db)
    return [u.to_dict() for u in users]


@router.put("/me")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def update_me(
    request: Request,
    payload: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    """
    Atualiza o perfil. A troca de senha é opcional: se falhar, o perfil
    continua salvo e o erro vem em `password_error`.
    """
    return await auth_service.update_profile(db, session, payload.model_dump(exclude_unset=True))


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    user = await auth_service.get_user(db, user_id)
    return user.to_dict()
