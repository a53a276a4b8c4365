"""
Exclusão de empresa com auditoria: tudo ou nada.
"""
import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from backoffice.core.errors import PersistenceError, NotFoundError
from backoffice.models import Company, Contact, InformationLog, AuditRecord, AUDIT_COMPANY_DELETION
from backoffice.schemas import CompanyCreate, ContactCreate, InfoLogCreate
from backoffice.services import company_service, contact_service, info_log_service

COMPANY = {
    "cnpj": "11.222.333/0001-81",
    "razao_social": "Acme Comércio LTDA",
    "nome_fantasia": "Acme",
    "endereco": {
        "logradouro": "Av. Paulista",
        "numero": "1000",
        "bairro": "Bela Vista",
        "cidade": "São Paulo",
        "estado": "SP",
        "cep": "01310100",
    },
    "telefone": "11987654321",
    "email": "contato@acme.com.br",
}


async def _count(db, model, **filters):
    query = select(func.count()).select_from(model)
    for field, value in filters.items():
        query = query.where(getattr(model, field) == value)
    return await db.scalar(query)


@pytest.fixture
async def populated_company(db, actor):
    """Empresa com 2 contatos e 3 logs"""
    company = await company_service.create_company(db, CompanyCreate(**COMPANY).model_dump(), actor)

    contacts = []
    for nome in ("João Silva", "Carla Dias"):
        contact = await contact_service.create_contact(db, ContactCreate(
            empresa_id=company.id,
            nome=nome,
            email=f"{nome.split()[0].lower()}@acme.com.br",
        ).model_dump(), actor)
        contacts.append(contact)

    for i in range(3):
        await info_log_service.create_log(db, InfoLogCreate(
            empresa_id=company.id,
            contato_id=contacts[i % 2].id,
            titulo=f"Reunião {i}",
            descricao="Alinhamento do contrato",
            categoria="reuniao",
            data_ocorrencia="2024-05-10",
        ).model_dump(), actor)

    return company


class TestDeleteCompanyWithAudit:

    async def test_deletes_everything_and_writes_audit(self, db, session_factory, actor, populated_company):
        audit = await company_service.delete_company_with_audit(db, populated_company.id, actor)

        assert audit.tipo == AUDIT_COMPANY_DELETION
        assert audit.contatos_excluidos == 2
        assert audit.logs_excluidos == 3
        assert audit.empresa_cnpj == "11222333000181"
        assert audit.empresa_nome == "Acme"
        assert audit.usuario_email == actor.email
        assert audit.detalhes["razao_social"] == "Acme Comércio LTDA"
        assert audit.detalhes["endereco"]["cep"] == "01310-100"

        async with session_factory() as check:
            assert await _count(check, Company, id=populated_company.id) == 0
            assert await _count(check, Contact, empresa_id=populated_company.id) == 0
            assert await _count(check, InformationLog, empresa_id=populated_company.id) == 0
            assert await _count(check, AuditRecord) == 1

    async def test_commit_failure_changes_nothing(
        self, db, session_factory, actor, populated_company, monkeypatch
    ):
        async def failing_commit():
            raise SQLAlchemyError("disk I/O error")

        monkeypatch.setattr(db, "commit", failing_commit)

        with pytest.raises(PersistenceError) as exc_info:
            await company_service.delete_company_with_audit(db, populated_company.id, actor)
        assert exc_info.value.message == "Erro ao excluir empresa"

        async with session_factory() as check:
            assert await _count(check, Company, id=populated_company.id) == 1
            assert await _count(check, Contact, empresa_id=populated_company.id) == 2
            assert await _count(check, InformationLog, empresa_id=populated_company.id) == 3
            assert await _count(check, AuditRecord) == 0

    async def test_unknown_company(self, db, actor):
        with pytest.raises(NotFoundError):
            await company_service.delete_company_with_audit(db, "nao-existe", actor)

    async def test_summary_counts(self, db, populated_company):
        summary = await company_service.get_company_summary(db, populated_company.id)
        assert summary["contatos"] == 2
        assert summary["logs"] == 3
        assert summary["empresa"]["cnpj_formatado"] == "11.222.333/0001-81"


class TestDeleteContact:

    async def test_logs_stay_with_company_without_contact(self, db, session_factory, actor, populated_company):
        contacts = await contact_service.list_by_company(db, populated_company.id)
        carla = next(c for c in contacts if c.nome == "Carla Dias")

        await contact_service.delete_contact(db, carla.id, actor)

        async with session_factory() as check:
            assert await _count(check, Contact, empresa_id=populated_company.id) == 1
            assert await _count(check, InformationLog, empresa_id=populated_company.id) == 3
            assert await _count(check, InformationLog, contato_id=carla.id) == 0
            assert await _count(check, InformationLog, contato_id=None) == 1


class TestDeleteCompanyEndpoint:

    async def _create(self, client, auth_headers):
        response = await client.post("/api/companies", json=COMPANY, headers=auth_headers)
        assert response.status_code == 201, response.text
        company = response.json()

        response = await client.post("/api/contacts", json={
            "empresa_id": company["id"],
            "nome": "João Silva",
            "email": "joao@acme.com.br",
        }, headers=auth_headers)
        assert response.status_code == 201, response.text
        return company

    async def test_wrong_password_deletes_nothing(self, client, auth_headers):
        company = await self._create(client, auth_headers)

        response = await client.request(
            "DELETE",
            f"/api/companies/{company['id']}",
            json={"password": "errada"},
            headers=auth_headers,
        )

        assert response.status_code == 401
        assert response.json()["code"] == "wrong-password"

        response = await client.get(f"/api/companies/{company['id']}/summary", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["contatos"] == 1

        response = await client.get("/api/audit", headers=auth_headers)
        assert response.json()["total"] == 0

    async def test_password_is_required(self, client, auth_headers):
        company = await self._create(client, auth_headers)

        response = await client.request(
            "DELETE", f"/api/companies/{company['id']}", json={}, headers=auth_headers
        )
        assert response.status_code == 422

    async def test_delete_returns_audit(self, client, auth_headers, admin_credentials):
        company = await self._create(client, auth_headers)

        response = await client.request(
            "DELETE",
            f"/api/companies/{company['id']}",
            json={"password": admin_credentials["password"]},
            headers=auth_headers,
        )

        assert response.status_code == 200, response.text
        body = response.json()
        assert body["contatos_excluidos"] == 1
        assert body["logs_excluidos"] == 0

        response = await client.get(f"/api/companies/{company['id']}", headers=auth_headers)
        assert response.status_code == 404

        response = await client.get(f"/api/audit/{body['audit_id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["empresa_cnpj"] == "11222333000181"

    async def test_password_attempts_are_rate_limited(self, client, auth_headers, admin_credentials):
        company = await self._create(client, auth_headers)
        url = f"/api/companies/{company['id']}"

        for _ in range(10):
            response = await client.request("DELETE", url, json={"password": "errada"}, headers=auth_headers)
            assert response.status_code == 401

        # mesmo a senha correta é barrada depois do limite
        response = await client.request(
            "DELETE", url, json={"password": admin_credentials["password"]}, headers=auth_headers
        )
        assert response.status_code == 429
        assert response.json()["code"] == "too-many-requests"

        response = await client.get(f"{url}/summary", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["contatos"] == 1

        response = await client.get("/api/audit", headers=auth_headers)
        assert response.json()["total"] == 0
