"""
Operation Ledger.

Every lookup is scoped by (operation_id, user_id): an operation that belongs
to somebody else is reported exactly like one that does not exist.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from cryptoapp import models, schemas
from cryptoapp.core.database import is_row_id
from cryptoapp.core.errors import InvalidInput, NotFound

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("operation_type", "crypto_currency", "crypto_amount")
NOT_FOUND_MESSAGE = "Operation not found"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _next_stamp(previous: Optional[datetime]) -> datetime:
    # updated_at must move forward even when the clock does not
    now = _utcnow()
    if previous is None:
        return now
    if previous.tzinfo is None:
        # SQLite gives the value back without its timezone
        previous = previous.replace(tzinfo=timezone.utc)
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


def _check_fields(fields: dict) -> dict:
    """Validate and normalise a set of column values. Raises InvalidInput."""
    cleaned = {}
    for key, value in fields.items():
        if isinstance(value, str):
            value = value.strip()
        cleaned[key] = value

    for key in REQUIRED_FIELDS:
        if key in cleaned and cleaned[key] in (None, ""):
            raise InvalidInput("Operation type, crypto currency and crypto amount are required")

    crypto_amount = cleaned.get("crypto_amount")
    if crypto_amount is not None and not Decimal(crypto_amount) > 0:
        raise InvalidInput("crypto_amount must be greater than zero")

    fiat_amount = cleaned.get("fiat_amount")
    if fiat_amount is not None and Decimal(fiat_amount) < 0:
        raise InvalidInput("fiat_amount cannot be negative")

    if "status" in cleaned:
        status = cleaned["status"]
        if status not in models.OPERATION_STATUSES:
            allowed = ", ".join(models.OPERATION_STATUSES)
            raise InvalidInput(f"status must be one of: {allowed}")

    return cleaned


def create(db: Session, owner_id: int, data: schemas.OperationCreate) -> models.Operation:
    fields = data.model_dump()
    if not fields.get("status"):
        fields["status"] = models.DEFAULT_STATUS

    missing = [key for key in REQUIRED_FIELDS if fields.get(key) in (None, "")]
    if missing:
        raise InvalidInput("Operation type, crypto currency and crypto amount are required")
    fields = _check_fields(fields)

    now = _utcnow()
    operation = models.Operation(user_id=owner_id, created_at=now, updated_at=now, **fields)

    db.add(operation)
    db.commit()
    db.refresh(operation)

    logger.info("Operation %s created for user %s", operation.operation_id, owner_id)
    return operation


def list_by_owner(db: Session, owner_id: int) -> List[models.Operation]:
    return (
        db.query(models.Operation)
        .filter(models.Operation.user_id == owner_id)
        .order_by(models.Operation.created_at.desc(), models.Operation.operation_id.desc())
        .all()
    )


def summarize(operations: Iterable[models.Operation]) -> dict:
    operations = list(operations)
    return {
        "total_operations": len(operations),
        "by_type": dict(Counter(op.operation_type for op in operations)),
        "by_status": dict(Counter(op.status for op in operations)),
    }


def get_owned(db: Session, operation_id: int, owner_id: int) -> models.Operation:
    # Out-of-range ids cannot exist, and must not reach the driver
    if not is_row_id(operation_id) or not is_row_id(owner_id):
        raise NotFound(NOT_FOUND_MESSAGE)
    operation = (
        db.query(models.Operation)
        .filter(models.Operation.operation_id == operation_id, models.Operation.user_id == owner_id)
        .first()
    )
    if not operation:
        raise NotFound(NOT_FOUND_MESSAGE)
    return operation


def update_owned(
    db: Session, operation_id: int, owner_id: int, changes: schemas.OperationUpdate
) -> models.Operation:
    # Only keys the client actually sent, and only from the allow-list schema
    fields = changes.model_dump(exclude_unset=True)
    if not fields:
        raise InvalidInput("No fields to update")
    fields = _check_fields(fields)

    operation = get_owned(db, operation_id, owner_id)

    for key, value in fields.items():
        if key in models.Operation.MUTABLE_FIELDS:
            setattr(operation, key, value)
    operation.updated_at = _next_stamp(operation.updated_at)

    db.commit()
    db.refresh(operation)

    logger.info("Operation %s updated (%s)", operation_id, ", ".join(sorted(fields)))
    return operation


def delete_owned(db: Session, operation_id: int, owner_id: int) -> models.Operation:
    operation = get_owned(db, operation_id, owner_id)

    # Detached copy of the last state, the row itself is gone after commit
    snapshot = models.Operation(
        **{column.name: getattr(operation, column.name) for column in models.Operation.__table__.columns}
    )

    db.delete(operation)
    db.commit()

    logger.info("Operation %s deleted by user %s", operation_id, owner_id)
    return snapshot
