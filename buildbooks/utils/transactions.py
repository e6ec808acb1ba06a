from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from buildbooks.core.exceptions import LedgerError, TransactionFailure
from buildbooks.logger_config import logger


@contextmanager
def unit_of_work(db: Session, failure_message: str):
    """
    Commit everything written inside the block, or nothing.

    Ledger errors roll back and propagate unchanged; database errors roll
    back and surface as TransactionFailure so the caller can resubmit.
    """
    try:
        yield db
        db.commit()
    except LedgerError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(failure_message)
        raise TransactionFailure(failure_message, details={"cause": type(e).__name__})
    except Exception:
        db.rollback()
        raise
