"""Paper size catalog"""
import logging

from sqlalchemy import func, select

from printshop import db
from printshop.models import PaperSize

logger = logging.getLogger(__name__)

DEFAULT_PAPER_SIZES = [
    ('A4', 'Standard A4 size (210 x 297 mm)'),
    ('Letter', 'US Letter size (8.5 x 11 inches)'),
    ('Legal/Folio', 'Legal size (8.5 x 14 inches)'),
]


def list_paper_sizes(include_inactive=False):
    query = select(PaperSize)
    if not include_inactive:
        query = query.where(PaperSize.active.is_(True))
    return db.session.scalars(query.order_by(PaperSize.name)).all()


def seed_paper_sizes(sizes=None):
    """Insert the default catalog when the table is empty; returns the number added"""
    if db.session.scalar(select(func.count(PaperSize.id))):
        return 0
    sizes = sizes or DEFAULT_PAPER_SIZES
    for name, description in sizes:
        db.session.add(PaperSize(name=name, description=description, active=True))
    db.session.commit()
    logger.info('Seeded %d paper sizes', len(sizes))
    return len(sizes)
