"""
Planilha de contratos e CSV de auditoria.
"""
import csv
from datetime import date
from io import BytesIO, StringIO

from openpyxl import load_workbook

from backoffice.services.export_service import (
    AUDIT_CSV_COLUMNS,
    build_audit_csv,
    build_contracts_workbook,
    build_process_rows,
    dated_filename,
    sheet_title,
)

PROCESS = {
    "id": "7f3c9a10-0000-0000-0000-000000000000",
    "titulo": "Contrato de limpeza",
    "data": "2024-03-01",
    "local": "Secretaria",
    "status": "em_andamento",
}


def progress(data, local, notes=None, **values):
    return {
        "action": "progress_update",
        "new_values": {"data": data, "local": local, **values},
        "notes": notes,
    }


class TestProcessRows:

    def test_initial_row_uses_status_label(self):
        assert build_process_rows(PROCESS, []) == [
            (date(2024, 3, 1), "Secretaria", "Em Andamento")
        ]

    def test_progress_rows_sorted_by_date(self):
        history = [
            {"action": "created", "new_values": {"data": "2024-01-01", "local": "X"}},
            progress("2024-05-20", "Procuradoria", montou_processo=True, numero_processo="13.548/25"),
            progress("2024-02-10", "Protocolo", notes="Aguardando assinatura"),
            progress("2024-04-01", "Gabinete"),
            progress(None, "Sem data"),
        ]

        rows = build_process_rows(PROCESS, history)

        assert rows == [
            (date(2024, 2, 10), "Protocolo", "Aguardando assinatura"),
            (date(2024, 3, 1), "Secretaria", "Em Andamento"),
            (date(2024, 4, 1), "Gabinete", "Andamento registrado"),
            (date(2024, 5, 20), "Procuradoria", "Montou processo: 13.548/25"),
        ]


class TestSheetTitle:

    def test_invalid_characters_removed(self):
        assert sheet_title({"titulo": "Contrato 12/2024: obras [lote*1]?"}) == "Contrato 122024 obras lote1"

    def test_truncated_to_31(self):
        assert len(sheet_title({"titulo": "x" * 50})) == 31

    def test_fallback_name(self):
        assert sheet_title({"id": "abcdef123456", "titulo": "//"}) == "Contrato abcdef12"

    def test_duplicates_are_numbered(self):
        used = set()
        assert sheet_title({"titulo": "Obras"}, used) == "Obras"
        assert sheet_title({"titulo": "obras"}, used) == "obras (2)"
        assert sheet_title({"titulo": "Obras"}, used) == "Obras (3)"


class TestContractsWorkbook:

    def test_one_sheet_per_contract(self):
        other = {**PROCESS, "id": "2", "titulo": "Contrato de vigilância", "status": "concluido"}
        content = build_contracts_workbook([(PROCESS, []), (other, [progress("2024-04-01", "Gabinete")])])

        wb = load_workbook(BytesIO(content))
        assert wb.sheetnames == ["Contrato de limpeza", "Contrato de vigilância"]

        ws = wb["Contrato de vigilância"]
        assert list(ws.iter_rows(values_only=True)) == [
            ("Data", "Local", "Status"),
            ("01/03/2024", "Secretaria", "Concluído"),
            ("01/04/2024", "Gabinete", "Andamento registrado"),
        ]

    def test_header_style(self):
        wb = load_workbook(BytesIO(build_contracts_workbook([(PROCESS, [])])))
        ws = wb.active

        header = ws["A1"]
        assert header.font.bold is True
        assert header.fill.fill_type == "solid"
        assert header.fill.start_color.rgb.endswith("FFFF99")
        assert ws.column_dimensions["A"].width == 12
        assert ws.column_dimensions["B"].width == 25
        assert ws.column_dimensions["C"].width == 50

    def test_broken_contract_is_skipped(self):
        broken = {"id": "3", "titulo": "Sem data", "local": "X", "status": "pendente"}
        wb = load_workbook(BytesIO(build_contracts_workbook([(broken, []), (PROCESS, [])])))
        assert wb.sheetnames == ["Contrato de limpeza"]

    def test_empty_workbook_has_default_sheet(self):
        wb = load_workbook(BytesIO(build_contracts_workbook([])))
        assert wb.sheetnames == ["Contratos"]
        assert [c.value for c in wb["Contratos"][1]] == ["Data", "Local", "Status"]


class TestAuditCsv:

    RECORD = {
        "data_exclusao": "2024-06-01T13:45:00",
        "empresa_nome": "Acme",
        "empresa_cnpj": "11222333000181",
        "contatos_excluidos": 2,
        "logs_excluidos": 5,
        "usuario_email": "maria@empresa.com.br",
        "detalhes": {
            "razao_social": "Acme Comércio LTDA",
            "endereco": {
                "logradouro": "Av. Paulista",
                "numero": "1000",
                "bairro": "Bela Vista",
                "cidade": "São Paulo",
                "estado": "SP",
                "cep": "01310-100",
            },
            "telefone": "(11) 98765-4321",
            "email": None,
            "site": "",
            "observacoes": "Cliente, \"antigo\"",
        },
    }

    def test_rows(self):
        content = build_audit_csv([self.RECORD])
        rows = list(csv.reader(StringIO(content)))

        assert rows[0] == list(AUDIT_CSV_COLUMNS)
        assert rows[1] == [
            "01/06/2024 13:45",
            "Acme",
            "Acme Comércio LTDA",
            "11222333000181",
            "Av. Paulista, 1000 - Bela Vista, São Paulo/SP",
            "01310-100",
            "(11) 98765-4321",
            "N/A",
            "N/A",
            "2",
            "5",
            "maria@empresa.com.br",
            "Cliente, \"antigo\"",
        ]

    def test_every_value_quoted(self):
        content = build_audit_csv([self.RECORD])
        data_line = content.splitlines()[1]
        assert data_line.startswith('"01/06/2024 13:45","Acme",')
        assert '"Cliente, ""antigo"""' in data_line

    def test_missing_details(self):
        content = build_audit_csv([{"empresa_nome": "Beta"}])
        row = list(csv.reader(StringIO(content)))[1]
        assert row[0] == "N/A"
        assert row[4] == "N/A"
        assert row[9:11] == ["0", "0"]

    def test_header_only(self):
        assert build_audit_csv([]).count("\n") == 1


def test_dated_filename():
    assert dated_filename("relatorio_contratos", "xlsx", date(2024, 3, 9)) == "relatorio_contratos_2024-03-09.xlsx"
