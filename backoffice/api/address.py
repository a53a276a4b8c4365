"""
Back-office - Address API
Preenchimento de endereço a partir do CEP
"""
from fastapi import APIRouter, Depends, HTTPException, status

from backoffice.core import Session
from backoffice.core.address_lookup import lookup_cep
from backoffice.api.auth import get_current_session

router = APIRouter(prefix="/cep", tags=["Address"])


@router.get("/{cep}")
async def get_address(cep: str, session: Session = Depends(get_current_session)):
    address = await lookup_cep(cep)
    if address is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="CEP não encontrado"
        )
    return address.to_dict()
