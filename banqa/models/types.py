"""Column type helpers shared by the ORM models."""

import enum

from sqlalchemy import JSON, Enum
from sqlalchemy.dialects.postgresql import JSONB

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def string_enum(enum_cls: type[enum.Enum], length: int = 40) -> Enum:
    """Store an enum by value in a VARCHAR column instead of a native type."""
    return Enum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )
