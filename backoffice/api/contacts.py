"""
Back-office - Contacts API
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.database import get_db
from backoffice.schemas import ContactCreate, ContactUpdate, ContactResponse
from backoffice.core import Session
from backoffice.api.auth import get_current_session
from backoffice.services import contact_service

router = APIRouter(prefix="/contacts", tags=["Contacts"])


@router.get("")
async def search_contacts(
    empresa_id: Optional[str] = Query(None),
    departamento: Optional[str] = Query(None),
    is_principal: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    contacts = await contact_service.search_contacts(
        db,
        empresa_id=empresa_id,
        departamento=departamento,
        is_principal=is_principal,
        search=search
    )
    return [c.to_dict() for c in contacts]


@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def create_contact(
    payload: ContactCreate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    contact = await contact_service.create_contact(db, payload.model_dump(), session)
    return contact.to_dict()


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(
    contact_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    contact = await contact_service.get_contact(db, contact_id)
    return contact.to_dict()


@router.put("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: str,
    payload: ContactUpdate,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    contact = await contact_service.update_contact(
        db, contact_id, payload.model_dump(exclude_unset=True), session
    )
    return contact.to_dict()


@router.delete("/{contact_id}")
async def delete_contact(
    contact_id: str,
    db: AsyncSession = Depends(get_db),
    session: Session = Depends(get_current_session)
):
    await contact_service.delete_contact(db, contact_id, session)
    return {"message": "Contato excluído"}
