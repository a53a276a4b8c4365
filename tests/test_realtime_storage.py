"""
Broker de eventos, stream SSE e storage de arquivos.
"""
import json

import pytest

from backoffice.api.realtime import event_stream, format_event
from backoffice.core.errors import ValidationFailed, NotFoundError
from backoffice.core.realtime import ChangeBroker, broker
from backoffice.models import StoredFile
from backoffice.services.storage_service import StorageService, safe_filename


class FakeRequest:
    """Request que desconecta depois de `polls` consultas"""

    def __init__(self, polls: int):
        self.polls = polls

    async def is_disconnected(self) -> bool:
        self.polls -= 1
        return self.polls < 0


class TestChangeBroker:

    async def test_publish_reaches_subscribers_of_collection(self):
        changes = ChangeBroker()
        empresas = changes.subscribe("empresas")
        contatos = changes.subscribe("contatos")

        changes.publish("empresas", "created", "e1")

        assert empresas.get_nowait() == {"collection": "empresas", "event": "created", "id": "e1"}
        assert contatos.empty()

    async def test_full_queue_drops_oldest(self):
        changes = ChangeBroker(max_queue_size=2)
        queue = changes.subscribe("processes")

        for doc_id in ("p1", "p2", "p3"):
            changes.publish("processes", "updated", doc_id)

        assert [queue.get_nowait()["id"] for _ in range(queue.qsize())] == ["p2", "p3"]

    async def test_unsubscribe(self):
        changes = ChangeBroker()
        queue = changes.subscribe("processes")
        assert changes.subscriber_count("processes") == 1

        changes.unsubscribe("processes", queue)
        changes.publish("processes", "created", "p1")

        assert changes.subscriber_count("processes") == 0
        assert queue.empty()


class TestEventStream:

    async def test_forwards_events_and_unsubscribes(self):
        queue = broker.subscribe("processes")
        broker.publish("processes", "created", "p1")

        stream = event_stream(FakeRequest(polls=5), "processes", queue, keepalive=0.01)

        assert await stream.__anext__() == ": conectado a processes\n\n"
        message = await stream.__anext__()
        assert message.startswith("event: created\n")
        assert json.loads(message.split("data: ", 1)[1]) == {
            "collection": "processes", "event": "created", "id": "p1"
        }
        assert await stream.__anext__() == ": keepalive\n\n"

        await stream.aclose()
        assert broker.subscriber_count("processes") == 0

    async def test_service_publishes_after_commit(self, client, auth_headers):
        queue = broker.subscribe("processes")
        try:
            response = await client.post("/api/processes", json={
                "titulo": "Contrato", "data": "2024-03-01", "local": "Gabinete"
            }, headers=auth_headers)
            event = queue.get_nowait()
        finally:
            broker.unsubscribe("processes", queue)

        assert event == {"collection": "processes", "event": "created", "id": response.json()["id"]}

    async def test_unknown_collection(self, client, auth_headers):
        response = await client.get("/api/stream/desconhecida", headers=auth_headers)
        assert response.status_code == 404

    def test_format_event(self):
        assert format_event({"collection": "auditoria", "event": "created", "id": "a1"}) == (
            'event: created\ndata: {"collection": "auditoria", "event": "created", "id": "a1"}\n\n'
        )


class TestStorage:

    @pytest.fixture
    def root(self, tmp_path):
        return tmp_path / "storage"

    @pytest.fixture
    def storage(self, root):
        return StorageService(base_dir=str(root))

    async def test_upload_and_delete(self, storage, db, actor, root):
        stored = await storage.upload(
            db, "processes", "contrato assinado.pdf", b"%PDF-1.4", actor,
            entity_id="p1", content_type="application/pdf"
        )

        assert stored.path.startswith("processes/p1/")
        assert stored.path.endswith("_contrato_assinado.pdf")
        assert stored.name == "contrato assinado.pdf"
        assert stored.size == 8
        assert (root / stored.path).read_bytes() == b"%PDF-1.4"
        assert storage.url_for(stored.path) == f"/uploads/{stored.path}"

        await storage.delete(db, stored.path, actor)

        assert not (root / stored.path).exists()
        assert await db.get(StoredFile, stored.id) is None

    async def test_default_owner_folder(self, storage, db, actor):
        stored = await storage.upload(db, "avatars", "foto.png", b"png", actor)
        assert stored.path.startswith(f"avatars/{actor.user_id}/")

    @pytest.mark.parametrize("folder, filename, code", [
        ("processes", "script.exe", "invalid-extension"),
        ("processes", "sem_extensao", "invalid-extension"),
        ("segredos", "contrato.pdf", "invalid-folder"),
    ])
    async def test_rejected_uploads(self, storage, db, actor, root, folder, filename, code):
        with pytest.raises(ValidationFailed) as exc_info:
            await storage.upload(db, folder, filename, b"x", actor)

        assert exc_info.value.code == code
        assert not root.exists()

    async def test_too_large(self, storage, db, actor):
        storage.max_size = 4
        with pytest.raises(ValidationFailed) as exc_info:
            await storage.upload(db, "temp", "planilha.xlsx", b"12345", actor)
        assert exc_info.value.code == "file-too-large"

    async def test_path_traversal(self, storage, db, actor):
        with pytest.raises(ValidationFailed) as exc_info:
            await storage.delete(db, "../../etc/passwd", actor)
        assert exc_info.value.code == "invalid-path"

    async def test_delete_missing(self, storage, db, actor):
        with pytest.raises(NotFoundError):
            await storage.delete(db, "processes/p1/nada.pdf", actor)

    def test_safe_filename(self):
        assert safe_filename("../../contrato final (v2).pdf") == "contrato_final__v2_.pdf"
        assert safe_filename("") == "arquivo"

    async def test_upload_endpoint(self, client, auth_headers):
        response = await client.post(
            "/api/files/processes",
            files={"file": ("contrato.pdf", b"%PDF-1.4", "application/pdf")},
            data={"entity_id": "p1"},
            headers=auth_headers,
        )

        assert response.status_code == 201, response.text
        body = response.json()
        assert body["url"] == f"/uploads/{body['path']}"

        response = await client.delete("/api/files", params={"path": body["path"]}, headers=auth_headers)
        assert response.status_code == 200
