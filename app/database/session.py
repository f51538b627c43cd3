import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.core.errors import PersistenceError
from app.database.engine import engine

logger = logging.getLogger(__name__)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_raise(db, action):
    """Commit the unit of work or roll it back and raise PersistenceError."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Persistence failure while %s", action, exc_info=True)
        raise PersistenceError("Could not complete {}: {}".format(action, exc.__class__.__name__)) from exc
