# ============================================================================
# FILE: booking_core/services/user/user_service.py
# Customers and business owners - creation, lookup, contact updates
# ============================================================================
from sqlalchemy.orm import Session
from typing import Optional, Any
import logging

from booking_core.core.errors import InvalidInputError, NotFoundError
from booking_core.models.user import User, Owner, OwnerType
from booking_core.services.store.entity_store import EntityStore

logger = logging.getLogger(__name__)

user_store = EntityStore(User)
owner_store = EntityStore(Owner)

# Identity (id, email) is fixed once created
CONTACT_FIELDS = frozenset({"name", "surname", "phone"})


def normalize_email(email: str) -> str:
    return email.lower().strip()


def _contact_changes(changes: dict) -> dict:
    unknown = set(changes) - CONTACT_FIELDS
    if unknown:
        raise InvalidInputError(f"Only contact fields can be changed, got: {sorted(unknown)}")
    return {name: value for name, value in changes.items() if value is not None}


class UserService:
    """Service layer for user operations."""

    @staticmethod
    def create_user(
            db: Session,
            email: str,
            name: str,
            surname: Optional[str] = None,
            phone: Optional[str] = None
    ) -> User:
        """
        Register a user.
        Raises DuplicateKeyError if the email is taken (enforced by the unique index).
        """
        user = user_store.create(
            db,
            email=normalize_email(email),
            name=name,
            surname=surname,
            phone=phone,
        )
        logger.info(f"Registered user {user.id}")
        return user

    @staticmethod
    def get_user(db: Session, user_id: Any) -> User:
        return user_store.get_by_id(db, user_id)

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> User:
        user = db.query(User).filter(User.email == normalize_email(email)).first()
        if not user:
            raise NotFoundError("User", email)
        return user

    @staticmethod
    def update_contact(db: Session, user_id: Any, **changes: Any) -> User:
        return user_store.update(db, user_id, **_contact_changes(changes))

    @staticmethod
    def delete_user(db: Session, user_id: Any) -> None:
        user_store.delete(db, user_id)


class OwnerService:
    """Service layer for business owners."""

    @staticmethod
    def create_owner(
            db: Session,
            email: str,
            name: str,
            surname: Optional[str] = None,
            phone: Optional[str] = None,
            owner_type: OwnerType = OwnerType.INDIVIDUAL
    ) -> Owner:
        owner = owner_store.create(
            db,
            email=normalize_email(email),
            name=name,
            surname=surname,
            phone=phone,
            owner_type=OwnerType(owner_type),
        )
        logger.info(f"Registered {owner.owner_type} owner {owner.id}")
        return owner

    @staticmethod
    def get_owner(db: Session, owner_id: Any) -> Owner:
        return owner_store.get_by_id(db, owner_id)

    @staticmethod
    def get_owner_by_email(db: Session, email: str) -> Owner:
        owner = db.query(Owner).filter(Owner.email == normalize_email(email)).first()
        if not owner:
            raise NotFoundError("Owner", email)
        return owner

    @staticmethod
    def update_contact(db: Session, owner_id: Any, owner_type: Optional[OwnerType] = None, **changes: Any) -> Owner:
        values = _contact_changes(changes)
        if owner_type is not None:
            values["owner_type"] = OwnerType(owner_type)
        return owner_store.update(db, owner_id, **values)

    @staticmethod
    def delete_owner(db: Session, owner_id: Any) -> None:
        owner_store.delete(db, owner_id)
