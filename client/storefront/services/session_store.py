import logging
from typing import Callable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.db import SessionLocal
from storefront.repositories.local_store_repo import LocalStoreRepository

log = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"
SELECTED_ITEMS_KEY = "selectedCartItems"


class SessionStore:
    """
    Session credential and checkout handoff state kept in the durable local store.

    Each call uses a short-lived session from `session_factory` so the store
    can be shared by the whole app.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    def _get(self, key: str):
        with self._session_factory() as db:
            return LocalStoreRepository(db).get(key)

    def _set(self, key: str, value) -> None:
        with self._session_factory() as db:
            LocalStoreRepository(db).set(key, value)

    def _remove(self, key: str) -> None:
        with self._session_factory() as db:
            LocalStoreRepository(db).remove(key)

    def get_stored_token(self) -> Optional[str]:
        try:
            return self._get(TOKEN_KEY)
        except SQLAlchemyError as e:
            log.error("Error reading stored token: %s", e)
            return None

    def store_token(self, token: str, profile: Optional[dict] = None) -> None:
        self._set(TOKEN_KEY, token)
        if profile is not None:
            self._set(USER_KEY, profile)
        log.info("Session token stored")

    def get_profile(self) -> Optional[dict]:
        return self._get(USER_KEY)

    def sign_out(self) -> None:
        self._remove(TOKEN_KEY)
        self._remove(USER_KEY)
        log.info("Session token removed")

    def store_selected_items(self, product_ids: List[str]) -> None:
        self._set(SELECTED_ITEMS_KEY, list(product_ids))

    def get_selected_items(self) -> List[str]:
        return list(self._get(SELECTED_ITEMS_KEY) or [])

    def clear_selected_items(self) -> None:
        self._remove(SELECTED_ITEMS_KEY)
