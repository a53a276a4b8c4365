"""
CRM: empresas, contatos, logs de informação e estatísticas.
"""
import pytest

COMPANY = {
    "cnpj": "11.222.333/0001-81",
    "razao_social": "Acme Comércio LTDA",
    "nome_fantasia": "Acme",
    "endereco": {
        "logradouro": "Av. Paulista",
        "numero": "1000",
        "complemento": "",
        "bairro": "Bela Vista",
        "cidade": "São Paulo",
        "estado": "sp",
        "cep": "01310100",
    },
    "telefone": "11987654321",
    "email": "contato@acme.com.br",
}


@pytest.fixture
async def company(client, auth_headers):
    response = await client.post("/api/companies", json=COMPANY, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _contact(client, auth_headers, empresa_id, nome, **extra):
    response = await client.post("/api/contacts", json={
        "empresa_id": empresa_id,
        "nome": nome,
        "email": f"{nome.split()[0].lower()}@acme.com.br",
        **extra,
    }, headers=auth_headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestCompanies:

    async def test_create_normalizes_fields(self, company):
        assert company["cnpj"] == "11222333000181"
        assert company["cnpj_formatado"] == "11.222.333/0001-81"
        assert company["telefone"] == "(11) 98765-4321"
        assert company["endereco"]["estado"] == "SP"
        assert company["endereco"]["cep"] == "01310-100"
        assert company["endereco"]["complemento"] is None
        assert company["version"] == 1

    @pytest.mark.parametrize("field, value", [
        ("cnpj", "11.222.333/0001-82"),
        ("telefone", "119876"),
        ("email", "nao-e-email"),
    ])
    async def test_invalid_fields(self, client, auth_headers, field, value):
        response = await client.post(
            "/api/companies", json={**COMPANY, field: value}, headers=auth_headers
        )
        assert response.status_code == 422

    @pytest.mark.parametrize("field, value", [("estado", "XX"), ("cep", "0131")])
    async def test_invalid_address(self, client, auth_headers, field, value):
        payload = {**COMPANY, "endereco": {**COMPANY["endereco"], field: value}}
        response = await client.post("/api/companies", json=payload, headers=auth_headers)
        assert response.status_code == 422

    async def test_duplicate_cnpj(self, client, auth_headers, company):
        response = await client.post(
            "/api/companies",
            json={**COMPANY, "cnpj": "11222333000181", "nome_fantasia": "Outra"},
            headers=auth_headers,
        )
        assert response.status_code == 400
        assert response.json()["code"] == "cnpj-already-registered"

    async def test_update_and_version(self, client, auth_headers, company):
        url = f"/api/companies/{company['id']}"
        response = await client.put(url, json={"nome_fantasia": "Acme Brasil", "version": 1}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["nome_fantasia"] == "Acme Brasil"
        assert response.json()["version"] == 2

        response = await client.put(url, json={"nome_fantasia": "Acme SP", "version": 1}, headers=auth_headers)
        assert response.status_code == 409

    @pytest.mark.parametrize("field", ["cnpj", "razao_social", "nome_fantasia", "endereco"])
    async def test_required_field_cannot_be_nulled(self, client, auth_headers, company, field):
        url = f"/api/companies/{company['id']}"
        response = await client.put(url, json={field: None}, headers=auth_headers)
        assert response.status_code == 422

        current = (await client.get(url, headers=auth_headers)).json()
        assert current["version"] == 1
        assert current["razao_social"] == "Acme Comércio LTDA"

    async def test_optional_field_can_be_cleared(self, client, auth_headers, company):
        response = await client.put(
            f"/api/companies/{company['id']}", json={"telefone": None, "site": ""}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["telefone"] is None

    async def test_update_to_taken_cnpj(self, client, auth_headers, company):
        other = await client.post(
            "/api/companies", json={**COMPANY, "cnpj": "12345678000195"}, headers=auth_headers
        )
        response = await client.put(
            f"/api/companies/{other.json()['id']}", json={"cnpj": "11222333000181"}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "cnpj-already-registered"

    async def test_list_and_search(self, client, auth_headers, company):
        await client.post("/api/companies", json={
            **COMPANY,
            "cnpj": "12345678000195",
            "nome_fantasia": "Beta",
            "razao_social": "Beta Serviços SA",
            "endereco": {**COMPANY["endereco"], "estado": "RJ", "cidade": "Rio de Janeiro"},
        }, headers=auth_headers)

        page = (await client.get("/api/companies", headers=auth_headers)).json()
        assert page["total"] == 2

        page = (await client.get("/api/companies", params={"estado": "rj"}, headers=auth_headers)).json()
        assert [c["nome_fantasia"] for c in page["data"]] == ["Beta"]

        found = (await client.get(
            "/api/companies/search", params={"search": "11.222"}, headers=auth_headers
        )).json()
        assert [c["nome_fantasia"] for c in found] == ["Acme"]


class TestContacts:

    async def test_principal_first_then_by_name(self, client, auth_headers, company):
        await _contact(client, auth_headers, company["id"], "Zélia Costa")
        await _contact(client, auth_headers, company["id"], "Bruno Lima")
        await _contact(client, auth_headers, company["id"], "Paulo Reis", is_principal=True)

        response = await client.get(f"/api/companies/{company['id']}/contacts", headers=auth_headers)
        assert [c["nome"] for c in response.json()] == ["Paulo Reis", "Bruno Lima", "Zélia Costa"]

    async def test_unknown_company(self, client, auth_headers):
        response = await client.post("/api/contacts", json={
            "empresa_id": "nao-existe", "nome": "Ana", "email": "ana@acme.com.br"
        }, headers=auth_headers)
        assert response.status_code == 404

    async def test_phone_is_formatted(self, client, auth_headers, company):
        contact = await _contact(
            client, auth_headers, company["id"], "Bruno Lima", telefone="1133334444", celular=""
        )
        assert contact["telefone"] == "(11) 3333-4444"
        assert contact["celular"] is None

    async def test_update_and_delete(self, client, auth_headers, company):
        contact = await _contact(client, auth_headers, company["id"], "Bruno Lima")
        url = f"/api/contacts/{contact['id']}"

        response = await client.put(url, json={"cargo": "Gerente"}, headers=auth_headers)
        assert response.json()["cargo"] == "Gerente"

        assert (await client.delete(url, headers=auth_headers)).status_code == 200
        assert (await client.get(url, headers=auth_headers)).status_code == 404

    async def test_delete_unlinks_information_logs(self, client, auth_headers, company):
        contact = await _contact(client, auth_headers, company["id"], "Bruno Lima")
        log = (await client.post("/api/logs", json={
            "empresa_id": company["id"],
            "contato_id": contact["id"],
            "titulo": "Ligação",
            "descricao": "Pediu nova proposta",
            "categoria": "telefone",
            "data_ocorrencia": "2024-05-01",
        }, headers=auth_headers)).json()

        response = await client.delete(f"/api/contacts/{contact['id']}", headers=auth_headers)
        assert response.status_code == 200

        response = await client.get(f"/api/logs/{log['id']}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["contato_id"] is None
        assert response.json()["empresa_id"] == company["id"]

    @pytest.mark.parametrize("field", ["nome", "email", "is_principal"])
    async def test_required_field_cannot_be_nulled(self, client, auth_headers, company, field):
        contact = await _contact(client, auth_headers, company["id"], "Bruno Lima")
        response = await client.put(
            f"/api/contacts/{contact['id']}", json={field: None}, headers=auth_headers
        )
        assert response.status_code == 422


class TestInformationLogs:

    async def test_create_and_order(self, client, auth_headers, company):
        for titulo, quando in (("Primeira reunião", "2024-05-01"), ("Visita técnica", "2024-06-15T14:00:00Z")):
            response = await client.post("/api/logs", json={
                "empresa_id": company["id"],
                "titulo": titulo,
                "descricao": "Registro",
                "categoria": "reuniao",
                "data_ocorrencia": quando,
            }, headers=auth_headers)
            assert response.status_code == 201, response.text
            assert response.json()["relevancia"] == "media"
            assert response.json()["anexos"] == []

        response = await client.get(f"/api/companies/{company['id']}/logs", headers=auth_headers)
        assert [log["titulo"] for log in response.json()] == ["Visita técnica", "Primeira reunião"]

    async def test_contact_from_other_company(self, client, auth_headers, company):
        other = (await client.post(
            "/api/companies", json={**COMPANY, "cnpj": "12345678000195"}, headers=auth_headers
        )).json()
        stranger = await _contact(client, auth_headers, other["id"], "Carla Dias")

        response = await client.post("/api/logs", json={
            "empresa_id": company["id"],
            "contato_id": stranger["id"],
            "titulo": "Ligação",
            "descricao": "Contato errado",
            "categoria": "telefone",
            "data_ocorrencia": "2024-05-01",
        }, headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["code"] == "contact-company-mismatch"

    async def test_search_by_period(self, client, auth_headers, company):
        for quando in ("2024-01-10", "2024-03-10", "2024-05-10"):
            await client.post("/api/logs", json={
                "empresa_id": company["id"],
                "titulo": f"Log {quando}",
                "descricao": "Registro",
                "relevancia": "alta",
                "categoria": "email",
                "data_ocorrencia": quando,
            }, headers=auth_headers)

        response = await client.get("/api/logs", params={
            "empresa_id": company["id"],
            "data_inicio": "2024-02-01T00:00:00",
            "data_fim": "2024-04-01T00:00:00",
        }, headers=auth_headers)

        assert [log["titulo"] for log in response.json()] == ["Log 2024-03-10"]


class TestCrmStats:

    async def test_counts(self, client, auth_headers, company):
        await _contact(client, auth_headers, company["id"], "Paulo Reis", is_principal=True)
        await _contact(client, auth_headers, company["id"], "Bruno Lima")
        await client.post("/api/logs", json={
            "empresa_id": company["id"],
            "titulo": "Reunião",
            "descricao": "Registro",
            "relevancia": "critica",
            "categoria": "reuniao",
            "data_ocorrencia": "2024-05-01",
        }, headers=auth_headers)

        stats = (await client.get("/api/stats/crm", headers=auth_headers)).json()
        assert stats["total_empresas"] == 1
        assert stats["total_contatos"] == 2
        assert stats["total_logs"] == 1
        assert stats["empresas_por_estado"] == {"SP": 1}
        assert stats["logs_por_relevancia"] == {"critica": 1}
        assert stats["logs_por_categoria"] == {"reuniao": 1}
        assert stats["contatos_principais"] == 1
        assert stats["empresas_recentes"] == 1
