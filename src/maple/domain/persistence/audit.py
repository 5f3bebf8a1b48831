"""Audit stamping for created/updated metadata."""

from datetime import datetime
from typing import Any

from maple.domain.entities.shared import ensure_utc


def _check_principal(principal: str) -> None:
    if not principal or not principal.strip():
        raise ValueError("Audit principal must be a non-blank string")


def stamp_create(record: Any, principal: str, now: datetime) -> None:
    """Write ``created_by`` and ``created_on``. Touches nothing else."""
    _check_principal(principal)
    record.created_by = principal
    record.created_on = ensure_utc(now)


def stamp_update(record: Any, principal: str, now: datetime) -> None:
    """Write ``updated_by`` and ``updated_on``. Touches nothing else."""
    _check_principal(principal)
    record.updated_by = principal
    record.updated_on = ensure_utc(now)
