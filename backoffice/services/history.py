"""
Back-office - Histórico de contratos
Diferença entre snapshots e formatação das entradas para exibição.
Funções puras: recebem os dicts gravados em process_history.
"""
import re
from dataclasses import dataclass, field, asdict
from datetime import datetime, date
from typing import Any, Dict, Iterable, List, Optional

from backoffice.models.process import HistoryAction

EMPTY_VALUE = "vazio"
INVALID_DATE = "Data inválida"

FIELD_LABELS = {
    "titulo": "Título",
    "descricao": "Descrição",
    "status": "Status",
    "local": "Local",
    "prioridade": "Prioridade",
    "responsavel": "Responsável",
    "data": "Data",
    "numero_processo": "Número do processo",
    "updated_by": "Atualizado por",
}

ACTION_LABELS = {
    HistoryAction.CREATED.value: "Processo criado",
    HistoryAction.UPDATED.value: "Processo atualizado",
    HistoryAction.STATUS_CHANGED.value: "Status alterado",
    HistoryAction.PROGRESS_UPDATE.value: "Andamento lançado",
}

_DATETIME_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class FieldChange:
    field: str
    label: str
    old: str
    new: str

    def to_dict(self) -> dict:
        return {"field": self.field, "label": self.label, "from": self.old, "to": self.new}


@dataclass
class ProgressSummary:
    data: Optional[str] = None
    local: Optional[str] = None
    montou_processo: Optional[str] = None
    numero_processo: Optional[str] = None


@dataclass
class RenderedEntry:
    id: Optional[str]
    action: str
    action_label: str
    updated_by: str
    updated_at: str
    changes: List[FieldChange] = field(default_factory=list)
    progress: Optional[ProgressSummary] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "action_label": self.action_label,
            "updated_by": self.updated_by,
            "updated_at": self.updated_at,
            "changes": [c.to_dict() for c in self.changes],
            "progress": asdict(self.progress) if self.progress else None,
            "notes": self.notes,
        }


def format_value(value: Any) -> str:
    """
    Formata um valor do snapshot para exibição:
        None / ""            -> "vazio"
        bool                 -> Sim / Não
        data/hora (ISO)      -> dd/mm/aaaa HH:MM
        data (AAAA-MM-DD)    -> dd/mm/aaaa
    Datas que não podem ser interpretadas viram "Data inválida".
    """
    if value is None or value == "":
        return EMPTY_VALUE

    if isinstance(value, bool):
        return "Sim" if value else "Não"

    if isinstance(value, datetime):
        return value.strftime("%d/%m/%Y %H:%M")

    if isinstance(value, date):
        return value.strftime("%d/%m/%Y")

    if isinstance(value, str):
        if _DATETIME_RE.match(value):
            try:
                parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return INVALID_DATE
            return parsed.strftime("%d/%m/%Y %H:%M")

        if _DATE_RE.match(value):
            try:
                parsed = date.fromisoformat(value)
            except ValueError:
                return INVALID_DATE
            return parsed.strftime("%d/%m/%Y")

    return str(value)


def get_field_label(field_name: str) -> str:
    return FIELD_LABELS.get(field_name, field_name)


def compute_changes(old: Optional[Dict[str, Any]], new: Optional[Dict[str, Any]]) -> List[FieldChange]:
    """
    Campos de `new` cujo valor difere de `old`.
    `old` ausente é tratado como snapshot vazio.
    """
    old = old or {}
    changes = []
    for key, value in (new or {}).items():
        if old.get(key) != value:
            changes.append(FieldChange(
                field=key,
                label=get_field_label(key),
                old=format_value(old.get(key)),
                new=format_value(value),
            ))
    return changes


def _progress_summary(values: Dict[str, Any]) -> ProgressSummary:
    montou = values.get("montou_processo")
    return ProgressSummary(
        data=format_value(values["data"]) if values.get("data") else None,
        local=values.get("local") or None,
        montou_processo=format_value(montou) if montou is not None else None,
        numero_processo=values.get("numero_processo") or None,
    )


def render_entry(entry: Dict[str, Any]) -> RenderedEntry:
    """Converte uma entrada do histórico (dict) na forma exibida"""
    action = entry.get("action")
    rendered = RenderedEntry(
        id=entry.get("id"),
        action=action,
        action_label=ACTION_LABELS.get(action, action),
        updated_by=entry.get("updated_by") or "",
        updated_at=format_value(entry.get("updated_at")),
        notes=entry.get("notes") or None,
    )

    if action == HistoryAction.PROGRESS_UPDATE.value:
        rendered.progress = _progress_summary(entry.get("new_values") or {})
    else:
        rendered.changes = compute_changes(entry.get("old_values"), entry.get("new_values"))

    return rendered


def render_history(entries: Iterable[Dict[str, Any]]) -> List[RenderedEntry]:
    """Renderiza na ordem recebida"""
    return [render_entry(entry) for entry in entries]
