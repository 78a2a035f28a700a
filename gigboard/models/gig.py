from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    String,
    Text,
    Numeric,
    DateTime,
    Uuid,
    ForeignKey,
    CheckConstraint,
    Index,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gigboard.core.lifecycle import GigStatus
from gigboard.db.base import Base
from gigboard.models.user import User, _now


class Gig(Base):
    __tablename__ = "gigs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    budget: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=GigStatus.open.value,
        server_default=text(f"'{GigStatus.open.value}'"),
    )
    hired_freelancer_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, server_default=func.now()
    )

    # many-to-one only; bids are resolved by indexed lookup on bids.gig_id
    owner: Mapped[User] = relationship(User, foreign_keys=[owner_id])
    hired_freelancer: Mapped[Optional[User]] = relationship(User, foreign_keys=[hired_freelancer_id])

    __table_args__ = (
        CheckConstraint("budget > 0", name="budget_positive"),
        CheckConstraint("status IN ('open', 'assigned')", name="status_valid"),
        Index("ix_gigs_owner", "owner_id"),
        Index("ix_gigs_status", "status"),
        Index("ix_gigs_status_created", "status", "created_at"),
    )

    @property
    def state(self) -> GigStatus:
        return GigStatus(self.status)
