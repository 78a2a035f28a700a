"""Hire transaction: the single place a gig gets assigned.

Inside one atomic scope:
    load bid -> lock its gig -> check ownership and states ->
    gig open->assigned, bid pending->hired, other pending bids ->rejected
and commit, or roll back everything. Every state write is a compare-and-set
on the expected current status, so a concurrent hire that slipped past the
reads still cannot produce a second winner; the unique "one hired bid per
gig" index backs that up at the storage level.

Notifying the freelancer is not part of this module's transaction; callers
schedule it once hire() has returned.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from gigboard.core.config import get_settings
from gigboard.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from gigboard.core.lifecycle import (
    BidStatus,
    GigStatus,
    assign_gig,
    hire_bid,
    reject_bid,
)
from gigboard.db.session import atomic
from gigboard.models.bid import Bid
from gigboard.models.gig import Gig
from gigboard.policies.ownership import same_identity

logger = logging.getLogger(__name__)

ALREADY_ASSIGNED_MESSAGE = "This gig has already been assigned to another freelancer"


def _now():
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class HireResult:
    bid: Bid
    gig: Gig
    rejected_count: int


class HireService:
    def __init__(self, timeout_ms: Optional[int] = None):
        self.timeout_ms = timeout_ms if timeout_ms is not None else get_settings().hire_timeout_ms

    def _load_bid(self, db: Session, bid_id: uuid.UUID) -> Optional[Bid]:
        return db.execute(
            select(Bid)
            .where(Bid.id == bid_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def _load_gig_for_update(self, db: Session, gig_id: uuid.UUID) -> Optional[Gig]:
        """
        Lock the gig row (FOR UPDATE) to serialize hires on the same gig.
        """
        return (
            db.execute(
                select(Gig)
                .where(Gig.id == gig_id)
                .with_for_update(of=Gig)
                .execution_options(populate_existing=True)
            )
            .scalars()
            .one_or_none()
        )

    def hire(self, db: Session, *, bid_id: Any, requester_id: str) -> HireResult:
        try:
            bid_uuid = uuid.UUID(str(bid_id))
        except (TypeError, ValueError):
            raise NotFoundError("Bid not found")

        try:
            with atomic(db, timeout_ms=self.timeout_ms):
                bid = self._load_bid(db, bid_uuid)
                if not bid:
                    raise NotFoundError("Bid not found")

                gig = self._load_gig_for_update(db, bid.gig_id)
                if not gig:
                    raise NotFoundError("Gig not found")

                if not same_identity(gig.owner_id, requester_id):
                    raise AuthorizationError("You are not authorized to hire for this gig")

                if gig.state == GigStatus.assigned:
                    raise ConflictError(ALREADY_ASSIGNED_MESSAGE)

                if bid.state != BidStatus.pending:
                    raise ValidationError(f"Cannot hire this bid. Current status: {bid.status}")

                rejected_count = self._apply(db, gig=gig, bid=bid)
        except IntegrityError as e:
            # the one-hired-bid-per-gig index caught a concurrent winner
            logger.warning("hire lost a storage race", extra={"bid_id": str(bid_uuid)})
            raise ConflictError(ALREADY_ASSIGNED_MESSAGE) from e

        logger.info(
            "freelancer hired",
            extra={
                "bid_id": str(bid_uuid),
                "gig_id": str(gig.id),
                "freelancer_id": str(bid.freelancer_id),
                "rejected_count": rejected_count,
            },
        )
        return self._reload(db, bid_uuid, gig.id, rejected_count)

    def _apply(self, db: Session, *, gig: Gig, bid: Bid) -> int:
        now = _now()
        gig_target = assign_gig(gig.status)
        bid_target = hire_bid(bid.status)
        loser_target = reject_bid(BidStatus.pending)

        res = db.execute(
            update(Gig)
            .where(Gig.id == gig.id, Gig.status == GigStatus.open.value)
            .values(
                status=gig_target.value,
                hired_freelancer_id=bid.freelancer_id,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            raise ConflictError(ALREADY_ASSIGNED_MESSAGE)

        res = db.execute(
            update(Bid)
            .where(Bid.id == bid.id, Bid.status == BidStatus.pending.value)
            .values(status=bid_target.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            raise ValidationError("Cannot hire this bid. It is no longer pending.")

        # already-rejected bids are not touched and not counted
        res = db.execute(
            update(Bid)
            .where(
                Bid.gig_id == gig.id,
                Bid.id != bid.id,
                Bid.status == BidStatus.pending.value,
            )
            .values(status=loser_target.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return int(res.rowcount or 0)

    def _reload(self, db: Session, bid_id: uuid.UUID, gig_id: uuid.UUID, rejected_count: int) -> HireResult:
        db.expire_all()
        bid = db.execute(
            select(Bid)
            .where(Bid.id == bid_id)
            .options(selectinload(Bid.freelancer), selectinload(Bid.gig))
        ).scalar_one()
        gig = db.execute(
            select(Gig)
            .where(Gig.id == gig_id)
            .options(selectinload(Gig.owner), selectinload(Gig.hired_freelancer))
        ).scalar_one()
        return HireResult(bid=bid, gig=gig, rejected_count=rejected_count)
