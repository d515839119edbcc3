"""SQLAlchemy model for children a lullaby is made for."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Integer, String, Uuid

from dodo.models.base import Base, utc_now


class Child(Base):
    __tablename__ = "children"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, nullable=False)
    name = Column(String(100), nullable=False)
    age_months = Column(Integer, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        index=True,
    )


__all__ = ["Child"]
