# app/data/transaction.py
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.errors import Conflict, Internal
from app.utils.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def atomic(db: Session):
    """
    Jedna transakcja: commit na koncu bloku, rollback przy kazdym bledzie.
    Naruszenie constraintu zamieniane na Conflict, pozostale bledy bazy na Internal.
    Bledy domenowe przechodza bez zmian.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Transaction rolled back on constraint: {e.orig}")
        raise Conflict() from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Transaction rolled back: {e}")
        raise Internal("storage error") from e
    except Exception:
        db.rollback()
        raise
