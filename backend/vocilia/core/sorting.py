"""Shared ``order_by`` parsing for repository list queries."""

from __future__ import annotations

from sqlalchemy import asc, desc
from sqlalchemy.orm import Query

from vocilia.core.database import Base


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    allowed_fields: frozenset[str] | None = None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    """Order a query by a ``"field:direction"`` string (e.g. ``"amount_sek:asc"``).

    Unknown fields, fields outside ``allowed_fields`` and bad directions fall
    back to the defaults rather than raising.
    """
    field, direction = default_field, default_direction

    if order_by:
        candidate, _, candidate_direction = order_by.partition(":")
        permitted = allowed_fields is None or candidate in allowed_fields
        if permitted and hasattr(model, candidate):
            field = candidate
            direction = candidate_direction if candidate_direction in ("asc", "desc") else "asc"

    order_func = asc if direction == "asc" else desc
    return query.order_by(order_func(getattr(model, field)))
