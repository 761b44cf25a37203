import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.config import settings

log = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL
engine = create_engine(DATABASE_URL, future=True, echo=False)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(reset: bool = False):
    """
    Initialize the local store schema.

    Behavior:
      - If `reset` is passed or RESET_DB env var is set to 1/true/yes, drop & recreate tables.
      - Otherwise, leave existing tables (and the stored session) in place.
    """
    # model modules must be imported so metadata is populated
    import storefront.models.stored_value  # noqa: F401

    env_reset = os.environ.get("RESET_DB", "false").lower() in ("1", "true", "yes")
    if reset or env_reset:
        log.info("Resetting local store at %s", DATABASE_URL)
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)
    log.debug("Local store initialized.")

