# marketplace/core/database.py

from ..extensions import db
from datetime import datetime
from contextlib import contextmanager
from typing import Generator
from uuid import uuid4
from sqlalchemy.orm import Session

from .exceptions import ResourceNotFound


def generate_uuid():
    return str(uuid4())


@contextmanager
def session_manager() -> Generator[Session, None, None]:
    """
    Context manager for a unit of work on the scoped session.
    Commits on success and rolls back on any error.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


class BaseModel(db.Model):
    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def get_by_id(cls, id):
        """Safely get instance by ID using the new pattern"""
        return db.session.get(cls, id)

    def save(self):
        """Save instance with proper error handling"""
        with session_manager() as session:
            session.add(self)
        return self

    def delete(self):
        """Delete instance with proper error handling"""
        with session_manager() as session:
            session.delete(self)

    @classmethod
    def create(cls, **kwargs):
        """Create new instance with proper session management"""
        instance = cls(**kwargs)
        return instance.save()

    @staticmethod
    def isoformat(value):
        return value.isoformat() if value else None


def get_or_404(model, id, label=None):
    """Fetch by primary key or raise ResourceNotFound"""
    instance = db.session.get(model, id)
    if instance is None:
        raise ResourceNotFound(f"{label or model.__name__} with ID {id} not found")
    return instance


def get_all_or_404(model, ids, label=None):
    """Fetch every row in ``ids``; a single unknown id fails the whole lookup"""
    wanted = list(dict.fromkeys(ids))
    if not wanted:
        return []
    found = db.session.execute(db.select(model).where(model.id.in_(wanted))).scalars().all()
    if len(found) != len(wanted):
        raise ResourceNotFound(f"One or more {label or model.__tablename__} not found")
    by_id = {item.id: item for item in found}
    return [by_id[i] for i in wanted]
