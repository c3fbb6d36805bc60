# ===== booking_core/services/availability/availability_rule_service.py =====
"""Write path for availability rules: validation, soft deactivation, supersession"""
from datetime import date, time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from booking_core.core.errors import InvalidAvailabilityRuleError
from booking_core.models.availability import AvailabilityType, BusinessAvailability
from booking_core.models.business import Business
from booking_core.services.availability.availability_service import parse_windows
from booking_core.services.availability.rules import TimeWindow
from booking_core.services.store.entity_store import EntityStore, coerce_id
import logging

logger = logging.getLogger(__name__)

rule_store = EntityStore(BusinessAvailability)
business_store = EntityStore(Business)

# Fields a caller may set; the rest are owned by the service
RULE_FIELDS = (
    "availability_type",
    "day_of_week",
    "start_date",
    "end_date",
    "specific_date",
    "start_time",
    "end_time",
    "is_closed",
    "blocked_windows",
    "block_reason",
    "priority",
)


class AvailabilityRuleService:
    """Handles availability rule operations"""

    @staticmethod
    def create_rule(db: Session, business_id: Any, **fields: Any) -> BusinessAvailability:
        """Validate and store a new active rule"""
        business_store.get_by_id(db, business_id)
        values = AvailabilityRuleService.validate(fields)

        rule = rule_store.create(db, business_id=coerce_id(business_id), is_active=True, **values)
        logger.info(f"Created {rule.availability_type} availability rule {rule.id} for business {business_id}")
        return rule

    @staticmethod
    def get_rule(db: Session, rule_id: Any) -> BusinessAvailability:
        return rule_store.get_by_id(db, rule_id)

    @staticmethod
    def list_rules(db: Session, business_id: Any, active_only: bool = True) -> List[BusinessAvailability]:
        business_store.get_by_id(db, business_id)
        query = db.query(BusinessAvailability).filter(
            BusinessAvailability.business_id == coerce_id(business_id)
        )
        if active_only:
            query = query.filter(BusinessAvailability.is_active.is_(True))
        return query.order_by(BusinessAvailability.created_at.asc()).all()

    @staticmethod
    def deactivate_rule(db: Session, rule_id: Any) -> BusinessAvailability:
        """Soft delete: the row stays for the audit trail"""
        rule = rule_store.get_by_id(db, rule_id)
        if not rule.is_active:
            return rule
        logger.info(f"Deactivating availability rule {rule_id}")
        return rule_store.update(db, rule.id, is_active=False)

    @staticmethod
    def supersede_rule(db: Session, rule_id: Any, **changes: Any) -> BusinessAvailability:
        """
        Replace a rule with an edited copy.
        The new rule is inserted and the old one deactivated in one transaction.
        """
        old = rule_store.get_by_id(db, rule_id)
        if not old.is_active:
            raise InvalidAvailabilityRuleError(f"Availability rule {rule_id} is inactive and cannot be superseded")

        merged = {name: getattr(old, name) for name in RULE_FIELDS}
        merged.update(changes)
        values = AvailabilityRuleService.validate(merged)

        replacement = BusinessAvailability(business_id=old.business_id, is_active=True, **values)
        db.add(replacement)
        db.flush()

        old.is_active = False
        old.superseded_by_id = replacement.id
        rule_store.save(db, replacement, {"rule_id": rule_id})

        logger.info(f"Availability rule {rule_id} superseded by {replacement.id}")
        return replacement

    @staticmethod
    def validate(fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Check a rule's shape and return the normalized column values.
        Raises InvalidAvailabilityRuleError on anything malformed.
        """
        unknown = set(fields) - set(RULE_FIELDS)
        if unknown:
            raise InvalidAvailabilityRuleError(f"Unknown availability rule fields: {sorted(unknown)}")

        try:
            kind = AvailabilityType(fields.get("availability_type"))
        except ValueError:
            raise InvalidAvailabilityRuleError(
                f"availability_type must be one of {[t.value for t in AvailabilityType]}"
            )

        values = {
            "availability_type": kind,
            "day_of_week": None,
            "start_date": None,
            "end_date": None,
            "specific_date": None,
            "is_closed": bool(fields.get("is_closed", False)),
            "priority": int(fields.get("priority") or 0),
            "block_reason": fields.get("block_reason"),
        }

        if kind == AvailabilityType.RECURRING_WEEKLY:
            day_of_week = fields.get("day_of_week")
            if day_of_week is None or not 0 <= int(day_of_week) <= 6:
                raise InvalidAvailabilityRuleError("RECURRING_WEEKLY rules need day_of_week between 0 (Monday) and 6")
            values["day_of_week"] = int(day_of_week)

        elif kind == AvailabilityType.DATE_RANGE:
            start_date, end_date = fields.get("start_date"), fields.get("end_date")
            if not isinstance(start_date, date) or not isinstance(end_date, date):
                raise InvalidAvailabilityRuleError("DATE_RANGE rules need start_date and end_date")
            if start_date > end_date:
                raise InvalidAvailabilityRuleError(
                    f"DATE_RANGE start_date {start_date} is after end_date {end_date}"
                )
            values["start_date"], values["end_date"] = start_date, end_date

        else:
            specific_date = fields.get("specific_date")
            if not isinstance(specific_date, date):
                raise InvalidAvailabilityRuleError("SPECIFIC_DATE rules need specific_date")
            values["specific_date"] = specific_date

        if values["is_closed"]:
            values.update(start_time=None, end_time=None, blocked_windows=[])
            return values

        start_time, end_time = fields.get("start_time"), fields.get("end_time")
        if not isinstance(start_time, time) or not isinstance(end_time, time):
            raise InvalidAvailabilityRuleError("Open rules need start_time and end_time")
        if start_time >= end_time:
            raise InvalidAvailabilityRuleError(
                f"start_time {start_time} must be before end_time {end_time} (rules cannot cross midnight)"
            )

        open_window = TimeWindow(start_time, end_time)
        try:
            blocked = parse_windows(fields.get("blocked_windows"))
        except (KeyError, TypeError, ValueError):
            raise InvalidAvailabilityRuleError("blocked_windows entries need 'start' and 'end' times (HH:MM)")

        for window in blocked:
            if window.start >= window.end or not open_window.contains(window):
                raise InvalidAvailabilityRuleError(
                    f"Blocked window {window} must lie inside the open hours {open_window}"
                )

        values.update(
            start_time=start_time,
            end_time=end_time,
            blocked_windows=[
                {"start": w.start.strftime("%H:%M"), "end": w.end.strftime("%H:%M")} for w in blocked
            ],
        )
        return values

    @staticmethod
    def find_rule_for_business(db: Session, business_id: Any, rule_id: Any) -> Optional[BusinessAvailability]:
        rule = rule_store.find_by_id(db, rule_id)
        if rule is None or rule.business_id != coerce_id(business_id):
            return None
        return rule
