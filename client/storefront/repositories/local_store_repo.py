import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from storefront.models.stored_value import StoredValue
from storefront.utils.transactions import smart_transaction

log = logging.getLogger(__name__)


class LocalStoreRepository:
    """Durable key-value store backed by the local SQLite database."""

    def __init__(self, db: Session):
        self.db = db

    def _row(self, key: str) -> Optional[StoredValue]:
        return self.db.query(StoredValue).filter(StoredValue.key == key).first()

    def get(self, key: str) -> Any:
        row = self._row(key)
        return row.value if row else None

    def set(self, key: str, value: Any) -> None:
        with smart_transaction(self.db):
            row = self._row(key)
            if row:
                row.value = value
            else:
                self.db.add(StoredValue(key=key, value=value))
            self.db.flush()
        log.debug("stored key=%r", key)

    def remove(self, key: str) -> None:
        with smart_transaction(self.db):
            row = self._row(key)
            if row:
                self.db.delete(row)
                self.db.flush()
