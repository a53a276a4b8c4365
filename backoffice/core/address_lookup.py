"""
Back-office - Consulta de endereco por CEP (ViaCEP)
"""
import logging
from dataclasses import dataclass, asdict
from typing import Optional

import httpx

from .config import settings
from .errors import AddressLookupError, ValidationFailed
from .validators import clean_digits, format_cep

logger = logging.getLogger(__name__)


@dataclass
class Address:
    cep: str
    logradouro: str
    bairro: str
    cidade: str
    estado: str

    def to_dict(self):
        return asdict(self)


async def lookup_cep(cep: str, client: Optional[httpx.AsyncClient] = None) -> Optional[Address]:
    """
    Busca endereco pelo CEP.

    Returns:
        Address quando encontrado, None quando o servico responde que o CEP nao existe.

    Raises:
        ValidationFailed: CEP sem 8 digitos
        AddressLookupError: falha de rede ou resposta invalida do servico
    """
    clean_cep = clean_digits(cep)
    if len(clean_cep) != 8:
        raise ValidationFailed("CEP deve conter 8 dígitos", "invalid-cep")

    url = f"{settings.CEP_LOOKUP_URL.rstrip('/')}/{clean_cep}/json/"

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.CEP_LOOKUP_TIMEOUT) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Falha ao consultar CEP {clean_cep}: {e}")
        raise AddressLookupError("Não foi possível buscar o endereço. Tente novamente.")

    if not isinstance(data, dict) or data.get("erro"):
        logger.info(f"CEP nao encontrado: {clean_cep}")
        return None

    return Address(
        cep=format_cep(clean_cep),
        logradouro=data.get("logradouro") or "",
        bairro=data.get("bairro") or "",
        cidade=data.get("localidade") or "",
        estado=data.get("uf") or "",
    )
