"""Declarative base and column helpers shared by every table."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utc_now() -> datetime:
    """Timezone-aware UTC timestamp used for created/updated columns."""

    return datetime.now(timezone.utc)


__all__ = ["Base", "utc_now"]
