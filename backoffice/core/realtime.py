"""
Back-office - Notificacoes de alteracao em tempo real
Broker em memoria: os services publicam apos cada commit e o endpoint
/api/stream/{collection} repassa os eventos aos clientes (SSE).
"""
import asyncio
import logging
from collections import defaultdict
from typing import Dict, Set

logger = logging.getLogger(__name__)

COLLECTIONS = (
    "users",
    "processes",
    "process_history",
    "empresas",
    "contatos",
    "logs_informacao",
    "auditoria",
    "arquivos",
)


class ChangeBroker:
    """Distribui eventos {collection, event, id} para as filas assinantes"""

    def __init__(self, max_queue_size: int = 100):
        self.max_queue_size = max_queue_size
        self._subscribers: Dict[str, Set[asyncio.Queue]] = defaultdict(set)

    def subscribe(self, collection: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._subscribers[collection].add(queue)
        return queue

    def unsubscribe(self, collection: str, queue: asyncio.Queue) -> None:
        self._subscribers[collection].discard(queue)

    def subscriber_count(self, collection: str) -> int:
        return len(self._subscribers[collection])

    def publish(self, collection: str, event: str, doc_id: str) -> None:
        message = {"collection": collection, "event": event, "id": doc_id}
        for queue in list(self._subscribers[collection]):
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                # cliente lento: descarta o evento mais antigo
                queue.get_nowait()
                queue.put_nowait(message)
                logger.debug(f"Fila cheia em {collection}, evento antigo descartado")


broker = ChangeBroker()
