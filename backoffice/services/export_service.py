"""
Back-office - Exportação
Relatório de contratos em Excel (uma aba por contrato) e auditoria em CSV.
"""
import csv
import logging
import re
from datetime import date, datetime
from io import BytesIO, StringIO
from typing import Any, Dict, Iterable, List, Optional, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from backoffice.models.process import HistoryAction, STATUS_LABELS

logger = logging.getLogger(__name__)

SHEET_HEADERS = ("Data", "Local", "Status")
COLUMN_WIDTHS = {"A": 12, "B": 25, "C": 50}
SHEET_NAME_LIMIT = 31
DEFAULT_SHEET_NAME = "Contratos"

AUDIT_CSV_COLUMNS = (
    "Data da Exclusão",
    "Empresa",
    "Razão Social",
    "CNPJ",
    "Endereço",
    "CEP",
    "Telefone",
    "Email",
    "Site",
    "Contatos Excluídos",
    "Logs Excluídos",
    "Usuário",
    "Observações",
)

NOT_AVAILABLE = "N/A"

_INVALID_SHEET_CHARS = re.compile(r"[\\/?*\[\]:]")

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="FFFF99", end_color="FFFF99", fill_type="solid")
HEADER_BORDER = Border(
    left=Side(style="thin", color="000000"),
    right=Side(style="thin", color="000000"),
    top=Side(style="thin", color="000000"),
    bottom=Side(style="thin", color="000000"),
)
DATA_BORDER = Border(
    left=Side(style="thin", color="CCCCCC"),
    right=Side(style="thin", color="CCCCCC"),
    top=Side(style="thin", color="CCCCCC"),
    bottom=Side(style="thin", color="CCCCCC"),
)

Row = Tuple[date, str, str]


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def build_process_rows(process: Dict[str, Any], history: Iterable[Dict[str, Any]]) -> List[Row]:
    """
    Linhas da aba de um contrato: a linha inicial do contrato e uma linha
    por andamento lançado (com data e local), em ordem cronológica.
    """
    rows = [(
        _to_date(process["data"]),
        process["local"],
        STATUS_LABELS.get(process["status"], process["status"]),
    )]

    for entry in history:
        if entry.get("action") != HistoryAction.PROGRESS_UPDATE.value:
            continue
        values = entry.get("new_values") or {}
        if not values.get("data") or not values.get("local"):
            continue

        if entry.get("notes"):
            status = entry["notes"]
        elif values.get("montou_processo") and values.get("numero_processo"):
            status = f"Montou processo: {values['numero_processo']}"
        else:
            status = "Andamento registrado"

        rows.append((_to_date(values["data"]), values["local"], status))

    rows.sort(key=lambda row: row[0])
    return rows


def sheet_title(process: Dict[str, Any], used: Optional[set] = None) -> str:
    """Nome de aba válido no Excel e único dentro da planilha"""
    title = _INVALID_SHEET_CHARS.sub("", (process.get("titulo") or "")[:SHEET_NAME_LIMIT])
    if not title.strip():
        title = f"Contrato {str(process.get('id', ''))[:8]}"

    if used is None:
        return title

    candidate = title
    counter = 2
    while candidate.lower() in used:
        suffix = f" ({counter})"
        candidate = title[:SHEET_NAME_LIMIT - len(suffix)] + suffix
        counter += 1
    used.add(candidate.lower())
    return candidate


def _write_header(ws) -> None:
    ws.append(list(SHEET_HEADERS))
    for cell in ws[1]:
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.border = HEADER_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center")
    for column, width in COLUMN_WIDTHS.items():
        ws.column_dimensions[column].width = width


def _write_rows(ws, rows: List[Row]) -> None:
    for day, local, status in rows:
        ws.append([day.strftime("%d/%m/%Y"), local, status])
        for cell in ws[ws.max_row]:
            cell.border = DATA_BORDER
            cell.alignment = Alignment(horizontal="left", vertical="center")


def build_contracts_workbook(items: Iterable[Tuple[Dict[str, Any], List[Dict[str, Any]]]]) -> bytes:
    """
    Gera o xlsx com uma aba por contrato.
    `items` são pares (contrato, histórico). Um contrato que falhar é
    registrado no log e ignorado.
    """
    wb = Workbook()
    wb.remove(wb.active)
    used_titles = set()

    for process, history in items:
        try:
            rows = build_process_rows(process, history)
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Erro ao processar contrato {process.get('id')}: {e}")
            continue

        ws = wb.create_sheet(title=sheet_title(process, used_titles))
        _write_header(ws)
        _write_rows(ws, rows)

    if not wb.sheetnames:
        ws = wb.create_sheet(title=DEFAULT_SHEET_NAME)
        _write_header(ws)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def _or_na(value: Any) -> Any:
    if value is None or value == "":
        return NOT_AVAILABLE
    return value


def _format_address(endereco: Optional[Dict[str, Any]]) -> str:
    if not endereco:
        return NOT_AVAILABLE
    return (
        f"{endereco.get('logradouro', '')}, {endereco.get('numero', '')} - "
        f"{endereco.get('bairro', '')}, {endereco.get('cidade', '')}/{endereco.get('estado', '')}"
    )


def _format_instant(value: Any) -> str:
    if not value:
        return NOT_AVAILABLE
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value.strftime("%d/%m/%Y %H:%M")


def audit_csv_row(record: Dict[str, Any]) -> List[Any]:
    detalhes = record.get("detalhes") or {}
    endereco = detalhes.get("endereco") or {}
    return [
        _format_instant(record.get("data_exclusao")),
        _or_na(record.get("empresa_nome")),
        _or_na(detalhes.get("razao_social")),
        _or_na(record.get("empresa_cnpj")),
        _format_address(endereco),
        _or_na(endereco.get("cep")),
        _or_na(detalhes.get("telefone")),
        _or_na(detalhes.get("email")),
        _or_na(detalhes.get("site")),
        record.get("contatos_excluidos", 0),
        record.get("logs_excluidos", 0),
        _or_na(record.get("usuario_email")),
        _or_na(detalhes.get("observacoes")),
    ]


def build_audit_csv(records: Iterable[Dict[str, Any]]) -> str:
    """CSV das exclusões de empresa; todos os valores entre aspas"""
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(AUDIT_CSV_COLUMNS)
    for record in records:
        writer.writerow(audit_csv_row(record))
    return output.getvalue()


def dated_filename(prefix: str, extension: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{prefix}_{today.isoformat()}.{extension}"
