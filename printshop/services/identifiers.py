"""
Human-facing identifier allocation (``VIP-######``, ``JO-######``).

Identifiers are random draws checked against the record store, and the
unique constraint on the column settles races between concurrent
requests: a losing insert rolls back and is retried with a new draw.
"""
import logging
import secrets

from flask import current_app
from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError

from printshop import db
from printshop.errors import IdentifierAllocationError

logger = logging.getLogger(__name__)

MEMBER_ID_PREFIX = 'VIP-'
ORDER_NUMBER_PREFIX = 'JO-'
SUFFIX_DIGITS = 6


def generate_identifier(prefix, digits=SUFFIX_DIGITS):
    """Return ``prefix`` followed by ``digits`` random decimal digits"""
    return '{}{:0{width}d}'.format(prefix, secrets.randbelow(10 ** digits), width=digits)


def identifier_exists(column, candidate):
    return db.session.scalar(select(exists().where(column == candidate)))


def _attempts():
    return max(1, int(current_app.config.get('ID_ALLOCATION_ATTEMPTS', 5)))


def allocate(column, prefix):
    """
    Draw an identifier that is not yet present in ``column``

    Raises:
        IdentifierAllocationError: every draw collided
    """
    for _ in range(_attempts()):
        candidate = generate_identifier(prefix)
        if not identifier_exists(column, candidate):
            return candidate
    logger.error('Exhausted identifier draws for %s', column)
    raise IdentifierAllocationError()


def create_with_identifier(column, prefix, builder):
    """
    Persist a record carrying a freshly allocated identifier

    Args:
        column: Unique column holding the identifier (e.g. ``VipMember.unique_id``)
        prefix (str): Identifier prefix
        builder (callable): Receives the identifier and returns the unsaved
            record (with any owned children). Called again on every retry since
            a rollback discards pending objects.

    Returns:
        The committed record
    """
    for attempt in range(1, _attempts() + 1):
        identifier = allocate(column, prefix)
        record = builder(identifier)
        db.session.add(record)
        try:
            db.session.commit()
            return record
        except IntegrityError:
            db.session.rollback()
            logger.warning('Identifier %s collided on insert (attempt %d)', identifier, attempt)
    raise IdentifierAllocationError()
