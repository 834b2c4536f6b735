from contextlib import contextmanager
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ryo.core.exceptions import UpstreamError, ValidationError

logger = logging.getLogger("ryo")


@contextmanager
def upstream_errors(db: Session, action: str, conflict: str = None):
    """Roll back and re-raise database failures as application errors.

    With ``conflict`` set, unique-constraint violations become a
    ValidationError carrying that message instead of an UpstreamError.
    """
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        if conflict:
            logger.warning(f"Constraint violation while trying to {action}: {e.orig}")
            raise ValidationError(conflict) from e
        logger.error(f"Database error while trying to {action}: {e}")
        raise UpstreamError(f"failed to {action}") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while trying to {action}: {e}")
        raise UpstreamError(f"failed to {action}") from e
