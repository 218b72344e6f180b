"""
Base model with common fields and methods
"""
from datetime import datetime, timezone
from decimal import Decimal

from printshop import db


def utcnow():
    """Naive UTC timestamp; SQLite drops tzinfo so every column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel(db.Model):
    """Abstract base model with common fields"""
    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def touch(self):
        """Refresh updated_at explicitly (last write wins)."""
        self.updated_at = utcnow()

    def to_dict(self, exclude=None):
        """
        Convert model to dictionary

        Args:
            exclude (list): List of fields to exclude

        Returns:
            dict: Model as dictionary
        """
        exclude = exclude or []
        data = {}

        for column in self.__table__.columns:
            if column.name not in exclude:
                value = getattr(self, column.name)

                # Handle datetime
                if isinstance(value, datetime):
                    value = value.isoformat()
                # Handle Numeric
                elif isinstance(value, Decimal):
                    value = float(value)

                data[column.name] = value

        return data
