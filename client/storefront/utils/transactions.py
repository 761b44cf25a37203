from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session


@contextmanager
def smart_transaction(session: Session) -> Iterator[Session]:
    """
    Run a unit of local-store work on `session` and make it durable.

    If the session already autobegan a transaction (e.g. after a read), the
    work runs in a SAVEPOINT and the outer transaction is committed after it.
    Otherwise a transaction is begun and committed on exit.
    Usage:
        with smart_transaction(db):
            ... DB work ...
    """
    if session.in_transaction():
        with session.begin_nested():
            yield session
        session.commit()
    else:
        with session.begin():
            yield session
