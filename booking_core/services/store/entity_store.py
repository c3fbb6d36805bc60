# ============================================================================
# booking_core/services/store/entity_store.py
# Keyed single-record persistence with store-enforced uniqueness
# ============================================================================
"""
Generic repository used by every service.

Each call is one transaction. Uniqueness is never checked with a read first:
the row is written and the database's unique constraints/indexes decide,
so two concurrent writers cannot both get past validation.
"""
import logging
import uuid
from typing import Any, Dict, Generic, Optional, Type, TypeVar, Union

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from booking_core.core.errors import DuplicateKeyError, NotFoundError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

UNIQUE_VIOLATION_PGCODE = "23505"


def coerce_id(value: Union[str, uuid.UUID, None]) -> Optional[uuid.UUID]:
    """Turn an opaque id into a UUID; None for anything that cannot be one."""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, AttributeError, TypeError):
        return None


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the driver reports a unique constraint/index violation."""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION_PGCODE:
        return True
    message = str(orig if orig is not None else exc).lower()
    return "unique constraint" in message or "duplicate key" in message


class EntityStore(Generic[ModelT]):
    """create / get / update / delete for one model."""

    def __init__(self, model: Type[ModelT], entity_name: Optional[str] = None):
        self.model = model
        self.entity_name = entity_name or model.__name__

    def create(self, db: Session, **fields: Any) -> ModelT:
        instance = self.model(**fields)
        db.add(instance)
        self._commit(db, fields)
        db.refresh(instance)
        logger.debug(f"Created {self.entity_name} {instance.id}")
        return instance

    def find_by_id(self, db: Session, entity_id: Any) -> Optional[ModelT]:
        key = coerce_id(entity_id)
        if key is None:
            return None
        return db.get(self.model, key)

    def get_by_id(self, db: Session, entity_id: Any) -> ModelT:
        instance = self.find_by_id(db, entity_id)
        if instance is None:
            raise NotFoundError(self.entity_name, entity_id)
        return instance

    def exists(self, db: Session, entity_id: Any) -> bool:
        return self.find_by_id(db, entity_id) is not None

    def update(self, db: Session, entity_id: Any, **changes: Any) -> ModelT:
        instance = self.get_by_id(db, entity_id)
        for field, value in changes.items():
            if not hasattr(self.model, field):
                raise AttributeError(f"{self.entity_name} has no field '{field}'")
            setattr(instance, field, value)
        self._commit(db, changes)
        db.refresh(instance)
        return instance

    def save(self, db: Session, instance: ModelT, fields: Optional[Dict[str, Any]] = None) -> ModelT:
        """Commit pending changes made directly on an attached instance."""
        self._commit(db, fields or {})
        db.refresh(instance)
        return instance

    def delete(self, db: Session, entity_id: Any) -> None:
        instance = self.get_by_id(db, entity_id)
        db.delete(instance)
        self._commit(db, {"id": entity_id})
        logger.info(f"Deleted {self.entity_name} {entity_id}")

    def _commit(self, db: Session, fields: Dict[str, Any]) -> None:
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if is_unique_violation(exc):
                raise DuplicateKeyError(self.entity_name, fields) from exc
            raise
