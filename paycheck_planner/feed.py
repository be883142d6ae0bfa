"""Live snapshot subscription over the transaction store.

Listeners receive the full collection as an immutable tuple, newest date
first, once when they subscribe and again after every write made through
the feed.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, List, Mapping, Optional, Tuple

from . import db
from .models import Transaction

logger = logging.getLogger(__name__)

Snapshot = Tuple[Transaction, ...]
Listener = Callable[[Snapshot], None]


class TransactionFeed:
    """Push-based view of the transaction store."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path
        self._listeners: List[Listener] = []
        db.init_db(db_path)

    def snapshot(self) -> Snapshot:
        return tuple(db.fetch_transactions(self.db_path))

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` and deliver the current snapshot to it.

        Returns:
            Zero-argument callable that removes the subscription. Calling it
            more than once is harmless.
        """
        self._listeners.append(listener)
        self._deliver(listener, self.snapshot())

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def publish(self) -> Snapshot:
        """Re-read the store and push the snapshot to every listener."""
        snap = self.snapshot()
        logger.debug("Publishing snapshot of %d transaction(s) to %d listener(s)", len(snap), len(self._listeners))
        # Copy so a listener may unsubscribe while being notified
        for listener in list(self._listeners):
            self._deliver(listener, snap)
        return snap

    def _deliver(self, listener: Listener, snap: Snapshot) -> None:
        try:
            listener(snap)
        except Exception:
            logger.exception("Snapshot listener %r failed", listener)

    def create(self, payload: Mapping[str, Any]) -> Transaction:
        txn = db.add_transaction(payload, self.db_path)
        self.publish()
        return txn

    def set_funded(self, transaction_id: str, funded: bool) -> Transaction:
        txn = db.set_funded(transaction_id, funded, self.db_path)
        self.publish()
        return txn

    def set_received(self, transaction_id: str, received: bool) -> Transaction:
        txn = db.set_received(transaction_id, received, self.db_path)
        self.publish()
        return txn

    def delete(self, transaction_id: str) -> bool:
        deleted = db.delete_transaction(transaction_id, self.db_path)
        if deleted:
            self.publish()
        return deleted
