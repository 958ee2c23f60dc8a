import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from donorlink.errors import ConflictError, DonorLinkError, StoreError
from donorlink.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def atomic(action):
    """Commit everything done inside the block, or nothing at all."""
    try:
        yield db.session
        db.session.commit()
    except DonorLinkError:
        db.session.rollback()
        raise
    except IntegrityError as e:
        db.session.rollback()
        logger.warning('%s rejected by a database constraint: %s', action, e.orig)
        raise ConflictError(f'{action} conflicts with existing data') from e
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error('%s failed', action, exc_info=True)
        raise StoreError(f'{action} failed') from e


@contextmanager
def store_read(action):
    try:
        yield db.session
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error('%s failed', action, exc_info=True)
        raise StoreError(f'{action} failed') from e
