from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String,
    Text,
    Numeric,
    DateTime,
    Uuid,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
    Index,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gigboard.core.lifecycle import BidStatus
from gigboard.db.base import Base
from gigboard.models.gig import Gig
from gigboard.models.user import User, _now


class Bid(Base):
    __tablename__ = "bids"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    gig_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("gigs.id", ondelete="CASCADE"),
        nullable=False,
    )
    freelancer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    message: Mapped[str] = mapped_column(Text, nullable=False)
    proposed_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=BidStatus.pending.value,
        server_default=text(f"'{BidStatus.pending.value}'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, server_default=func.now()
    )

    gig: Mapped[Gig] = relationship(Gig)
    freelancer: Mapped[User] = relationship(User)

    __table_args__ = (
        UniqueConstraint("gig_id", "freelancer_id", name="uq_bids_gig_freelancer"),
        CheckConstraint("proposed_price > 0", name="price_positive"),
        CheckConstraint("status IN ('pending', 'hired', 'rejected')", name="status_valid"),
        # at most one winner per gig, whatever the application does
        Index(
            "uq_bids_one_hired_per_gig",
            "gig_id",
            unique=True,
            postgresql_where=text("status = 'hired'"),
            sqlite_where=text("status = 'hired'"),
        ),
        Index("ix_bids_gig_status", "gig_id", "status"),
        Index("ix_bids_freelancer_status", "freelancer_id", "status"),
        Index("ix_bids_created", "created_at"),
    )

    @property
    def state(self) -> BidStatus:
        return BidStatus(self.status)
