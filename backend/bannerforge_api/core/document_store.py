"""Document database adapters

The persistence facade talks to a ``DocumentStore``: collection/document
CRUD plus live ordered queries. ``InMemoryDocumentStore`` serves local
development and tests; ``FirestoreDocumentStore`` (core/firestore_store.py)
talks to the hosted database.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol
import itertools
import logging
import uuid

from bannerforge_api.models.errors import StoreError

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    """Sentinel replaced by the store's clock at write time"""

    def __repr__(self):
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass
class StoredDocument:
    """One document of a query snapshot"""
    id: str
    data: Dict[str, Any] = field(default_factory=dict)


SnapshotCallback = Callable[[List[StoredDocument]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class DocumentStore(Protocol):
    """Consumed interface of the hosted document database"""

    async def add(self, collection: str, data: Dict[str, Any]) -> str: ...

    async def get(self, path: str) -> Optional[Dict[str, Any]]: ...

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None: ...

    async def update(self, path: str, data: Dict[str, Any]) -> None: ...

    async def delete(self, path: str) -> None: ...

    def listen(
        self,
        collection: str,
        order_by: str,
        descending: bool,
        on_data: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe: ...


def _split(path: str):
    """Split a document path into (collection path, document id)"""
    path = path.strip("/")
    if "/" not in path:
        raise StoreError(f"Invalid document path: {path}")
    collection, doc_id = path.rsplit("/", 1)
    return collection, doc_id


@dataclass
class _Listener:
    collection: str
    order_by: str
    descending: bool
    on_data: SnapshotCallback
    on_error: ErrorCallback
    active: bool = True


class InMemoryDocumentStore:
    """
    Process-local document store.

    Documents live in a dict keyed by full path. Listeners receive the full,
    ordered collection snapshot on subscribe and after every write to that
    collection.
    """

    def __init__(self):
        self.documents: Dict[str, Dict[str, Any]] = {}
        self._order: Dict[str, int] = {}
        self._seq = itertools.count()
        self._listeners: List[_Listener] = []

    @staticmethod
    def _resolve(data: Dict[str, Any]) -> Dict[str, Any]:
        now = datetime.now(timezone.utc)
        return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in data.items()}

    def _write(self, path: str, data: Dict[str, Any]):
        if path not in self._order:
            self._order[path] = next(self._seq)
        self.documents[path] = data
        collection, _ = _split(path)
        self._notify(collection)

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._write(f"{collection.strip('/')}/{doc_id}", self._resolve(data))
        return doc_id

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        data = self.documents.get(path.strip("/"))
        return dict(data) if data is not None else None

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        path = path.strip("/")
        resolved = self._resolve(data)
        if merge and path in self.documents:
            resolved = {**self.documents[path], **resolved}
        self._write(path, resolved)

    async def update(self, path: str, data: Dict[str, Any]) -> None:
        path = path.strip("/")
        if path not in self.documents:
            raise StoreError(f"No document to update: {path}")
        self._write(path, {**self.documents[path], **self._resolve(data)})

    async def delete(self, path: str) -> None:
        path = path.strip("/")
        if self.documents.pop(path, None) is not None:
            self._order.pop(path, None)
            collection, _ = _split(path)
            self._notify(collection)

    def snapshot(self, collection: str, order_by: str, descending: bool) -> List[StoredDocument]:
        """Current ordered contents of a collection (direct children only)"""
        prefix = collection.strip("/") + "/"
        docs = [
            (path, data) for path, data in self.documents.items()
            if path.startswith(prefix) and "/" not in path[len(prefix):]
        ]
        # Documents missing the order field are excluded, as the hosted database does
        docs = [(path, data) for path, data in docs if data.get(order_by) is not None]
        docs.sort(key=lambda item: (item[1][order_by], self._order.get(item[0], 0)), reverse=descending)
        return [StoredDocument(id=path[len(prefix):], data=dict(data)) for path, data in docs]

    def _notify(self, collection: str):
        for listener in list(self._listeners):
            if listener.active and listener.collection == collection:
                self._deliver(listener)

    def _deliver(self, listener: _Listener):
        try:
            docs = self.snapshot(listener.collection, listener.order_by, listener.descending)
        except Exception as e:
            logger.error(f"[InMemoryStore] Snapshot failed for {listener.collection}: {e}")
            listener.on_error(e)
            return
        listener.on_data(docs)

    def listen(
        self,
        collection: str,
        order_by: str,
        descending: bool,
        on_data: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        listener = _Listener(collection.strip("/"), order_by, descending, on_data, on_error)
        self._listeners.append(listener)
        self._deliver(listener)

        def unsubscribe():
            listener.active = False
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
