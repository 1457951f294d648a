"""Firestore-backed document store"""

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

from google.cloud import firestore

from bannerforge_api.core.document_store import (
    SERVER_TIMESTAMP,
    ErrorCallback,
    SnapshotCallback,
    StoredDocument,
    Unsubscribe,
)
from bannerforge_api.models.errors import StoreError

logger = logging.getLogger(__name__)


def _to_firestore(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: (firestore.SERVER_TIMESTAMP if v is SERVER_TIMESTAMP else v) for k, v in data.items()}


class FirestoreDocumentStore:
    """
    DocumentStore over google-cloud-firestore.

    The client library is synchronous; CRUD calls run in a worker thread and
    watch callbacks (delivered on the library's own thread) are handed back
    to the event loop that opened the subscription.
    """

    def __init__(self, project_id: str, emulator_host: Optional[str] = None, client: Optional[firestore.Client] = None):
        if emulator_host:
            os.environ.setdefault("FIRESTORE_EMULATOR_HOST", emulator_host)
            logger.info(f"[Firestore] Using emulator at {emulator_host}")
        self.client = client or firestore.Client(project=project_id or None)

    async def _run(self, func, *args, **kwargs):
        try:
            return await asyncio.to_thread(func, *args, **kwargs)
        except StoreError:
            raise
        except Exception as e:
            logger.error(f"[Firestore] {getattr(func, '__name__', 'call')} failed: {e}")
            raise StoreError(str(e)) from e

    async def add(self, collection: str, data: Dict[str, Any]) -> str:
        _, doc_ref = await self._run(self.client.collection(collection).add, _to_firestore(data))
        return doc_ref.id

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        snapshot = await self._run(self.client.document(path).get)
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        await self._run(self.client.document(path).set, _to_firestore(data), merge=merge)

    async def update(self, path: str, data: Dict[str, Any]) -> None:
        await self._run(self.client.document(path).update, _to_firestore(data))

    async def delete(self, path: str) -> None:
        await self._run(self.client.document(path).delete)

    def listen(
        self,
        collection: str,
        order_by: str,
        descending: bool,
        on_data: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
        query = self.client.collection(collection).order_by(order_by, direction=direction)

        # Cleared by unsubscribe; deliveries already queued on the loop check it
        active = {"live": True}

        def deliver(func, arg):
            if active["live"]:
                func(arg)

        def dispatch(func, arg):
            if loop is not None and not loop.is_closed():
                loop.call_soon_threadsafe(deliver, func, arg)
            else:
                deliver(func, arg)

        def on_snapshot(docs, changes, read_time):
            try:
                payload: List[StoredDocument] = [StoredDocument(id=doc.id, data=doc.to_dict() or {}) for doc in docs]
            except Exception as e:
                logger.error(f"[Firestore] Failed to read snapshot of {collection}: {e}")
                dispatch(on_error, e)
                return
            dispatch(on_data, payload)

        try:
            watch = query.on_snapshot(on_snapshot)
        except Exception as e:
            logger.error(f"[Firestore] Failed to listen on {collection}: {e}")
            on_error(e)
            return lambda: None

        def unsubscribe():
            active["live"] = False
            watch.unsubscribe()

        return unsubscribe
