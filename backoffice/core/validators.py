"""
Back-office - Validadores e formatadores de formulario
CNPJ, telefone, CEP e UF. Funcoes puras, sem acesso a banco ou rede.
"""
import re

ESTADOS_BRASIL = (
    'AC', 'AL', 'AP', 'AM', 'BA', 'CE', 'DF', 'ES', 'GO', 'MA',
    'MT', 'MS', 'MG', 'PA', 'PB', 'PR', 'PE', 'PI', 'RJ', 'RN',
    'RS', 'RO', 'RR', 'SC', 'SP', 'SE', 'TO'
)

CNPJ_WEIGHTS_1 = (5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)
CNPJ_WEIGHTS_2 = (6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2)


def clean_digits(value) -> str:
    """Remove tudo que nao for digito"""
    return re.sub(r'\D', '', str(value or ''))


def _cnpj_check_digit(digits: str, weights) -> int:
    total = sum(int(d) * w for d, w in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cnpj(value) -> bool:
    """
    Valida CNPJ: 14 digitos e os dois digitos verificadores (modulo 11).
    Aceita entrada formatada (00.000.000/0000-00).
    """
    cnpj = clean_digits(value)
    if len(cnpj) != 14:
        return False

    digit1 = _cnpj_check_digit(cnpj[:12], CNPJ_WEIGHTS_1)
    digit2 = _cnpj_check_digit(cnpj[:13], CNPJ_WEIGHTS_2)
    return digit1 == int(cnpj[12]) and digit2 == int(cnpj[13])


def format_cnpj(value) -> str:
    """Mascara progressiva 00.000.000/0000-00 (limitada a 14 digitos)"""
    cnpj = clean_digits(value)[:14]
    if len(cnpj) <= 2:
        return cnpj
    if len(cnpj) <= 5:
        return f"{cnpj[:2]}.{cnpj[2:]}"
    if len(cnpj) <= 8:
        return f"{cnpj[:2]}.{cnpj[2:5]}.{cnpj[5:]}"
    if len(cnpj) <= 12:
        return f"{cnpj[:2]}.{cnpj[2:5]}.{cnpj[5:8]}/{cnpj[8:]}"
    return f"{cnpj[:2]}.{cnpj[2:5]}.{cnpj[5:8]}/{cnpj[8:12]}-{cnpj[12:]}"


def format_phone(value) -> str:
    """
    Formata telefone:
        10 digitos (fixo)    -> (DD) DDDD-DDDD
        11 digitos (celular) -> (DD) DDDDD-DDDD
    Qualquer outro tamanho volta apenas com os digitos.
    """
    phone = clean_digits(value)
    if len(phone) == 10:
        return f"({phone[:2]}) {phone[2:6]}-{phone[6:]}"
    if len(phone) == 11:
        return f"({phone[:2]}) {phone[2:7]}-{phone[7:]}"
    return phone


def validate_phone(value) -> bool:
    """Telefone valido: pelo menos 10 digitos"""
    return len(clean_digits(value)) >= 10


def format_cep(value) -> str:
    """CEP com 8 digitos -> DDDDD-DDD"""
    cep = clean_digits(value)
    if len(cep) == 8:
        return f"{cep[:5]}-{cep[5:]}"
    return cep


def validate_cep(value) -> bool:
    return len(clean_digits(value)) == 8


def validate_uf(value) -> bool:
    return (value or '').upper() in ESTADOS_BRASIL
