from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from gigboard.core.errors import ConflictError, NotFoundError, ValidationError
from gigboard.core.lifecycle import (
    BidStatus,
    bid_is_mutable,
    bid_is_withdrawable,
    gig_accepts_bids,
)
from gigboard.core.money import parse_positive_amount
from gigboard.db.session import atomic
from gigboard.models.bid import Bid
from gigboard.models.gig import Gig
from gigboard.policies.ownership import require_bid_author, require_gig_owner, same_identity

logger = logging.getLogger(__name__)

MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 1000

PRICE_MESSAGE = "Proposed price must be a positive number"
DUPLICATE_BID_MESSAGE = "You have already placed a bid on this gig"


# ---------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------


def _now():
    return datetime.now(timezone.utc)


def _as_uuid(value: Any, what: str) -> uuid.UUID:
    """Malformed ids cannot name an existing row."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise NotFoundError(f"{what} not found")


def _clean_message(message: str) -> str:
    text = message.strip()
    if len(text) < MESSAGE_MIN_LENGTH:
        raise ValidationError(f"Message must be at least {MESSAGE_MIN_LENGTH} characters")
    if len(text) > MESSAGE_MAX_LENGTH:
        raise ValidationError(f"Message cannot exceed {MESSAGE_MAX_LENGTH} characters")
    return text


def is_unique_violation(exc: IntegrityError, constraint: str) -> bool:
    orig = exc.orig
    # psycopg2 unique_violation
    if getattr(orig, "pgcode", None) == "23505":
        diag = getattr(orig, "diag", None)
        name = getattr(diag, "constraint_name", None)
        return name is None or name == constraint
    msg = str(orig)
    return constraint in msg or "UNIQUE constraint failed" in msg


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "pgcode", None) == "23503":
        return True
    return "FOREIGN KEY constraint failed" in str(orig)


# ---------------------------------------------------------------------
# service
# ---------------------------------------------------------------------


class BidService:
    """Submission, editing, withdrawal and listing of bids."""

    def get_bid(self, db: Session, bid_id: Any) -> Bid:
        bid = db.get(Bid, _as_uuid(bid_id, "Bid"))
        if not bid:
            raise NotFoundError("Bid not found")
        return bid

    def _get_gig(self, db: Session, gig_id: Any) -> Gig:
        gig = db.get(Gig, _as_uuid(gig_id, "Gig"))
        if not gig:
            raise NotFoundError("Gig not found")
        return gig

    def _lock_gig(self, db: Session, gig_id: uuid.UUID) -> Gig:
        gig = db.execute(
            select(Gig)
            .where(Gig.id == gig_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if gig is None:
            raise NotFoundError("Gig not found")
        return gig

    @staticmethod
    def _check_accepts_bid(gig: Gig, freelancer_id: str) -> None:
        if not gig_accepts_bids(gig.status):
            raise ValidationError("This gig is no longer accepting bids. It has been assigned")
        if same_identity(gig.owner_id, freelancer_id):
            raise ValidationError("You cannot bid on your own gig")

    # -----------------------------------------------------------------
    # submit
    # -----------------------------------------------------------------

    def submit_bid(
        self,
        db: Session,
        *,
        gig_id: Any,
        freelancer_id: str,
        message: Optional[str],
        proposed_price: Any,
    ) -> Bid:
        """
        Creates a pending bid. Uniqueness of (gig, freelancer) is left to
        the store: the insert is attempted and a constraint violation is
        reported as ConflictError.
        """
        if not gig_id or not message or not str(message).strip() or proposed_price in (None, ""):
            raise ValidationError("Please provide gig, message and proposed price")

        price = parse_positive_amount(proposed_price, PRICE_MESSAGE)
        text = _clean_message(message)

        gig = self._get_gig(db, gig_id)
        self._check_accepts_bid(gig, freelancer_id)

        bid = Bid(
            gig_id=gig.id,
            freelancer_id=_as_uuid(freelancer_id, "User"),
            message=text,
            proposed_price=price,
            status=BidStatus.pending.value,
        )
        try:
            with atomic(db):
                # a hire may have landed since the first read
                current = self._lock_gig(db, bid.gig_id)
                self._check_accepts_bid(current, freelancer_id)
                db.add(bid)
        except IntegrityError as e:
            if is_unique_violation(e, "uq_bids_gig_freelancer"):
                raise ConflictError(DUPLICATE_BID_MESSAGE) from e
            if is_foreign_key_violation(e):
                raise NotFoundError("Gig not found") from e
            raise ConflictError() from e

        db.refresh(bid)
        logger.info(
            "bid submitted",
            extra={"bid_id": str(bid.id), "gig_id": str(bid.gig_id), "freelancer_id": str(bid.freelancer_id)},
        )
        return bid

    # -----------------------------------------------------------------
    # edit / withdraw
    # -----------------------------------------------------------------

    def edit_bid(
        self,
        db: Session,
        *,
        bid_id: Any,
        requester_id: str,
        message: Optional[str] = None,
        proposed_price: Any = None,
    ) -> Bid:
        bid = self.get_bid(db, bid_id)
        require_bid_author(bid, requester_id, "You are not authorized to update this bid")

        if not bid_is_mutable(bid.status):
            raise ValidationError(
                f"Cannot update a {bid.status} bid. Only pending bids can be modified."
            )

        # validate everything before touching the row
        new_message = _clean_message(message) if message else None
        new_price = (
            parse_positive_amount(proposed_price, PRICE_MESSAGE)
            if proposed_price not in (None, "")
            else None
        )

        if new_message is None and new_price is None:
            return bid

        with atomic(db):
            # the status may have moved since it was read; only a pending row is edited
            current = db.execute(
                select(Bid)
                .where(Bid.id == bid.id)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
            if current is None:
                raise NotFoundError("Bid not found")
            if not bid_is_mutable(current.status):
                raise ValidationError(
                    f"Cannot update a {current.status} bid. Only pending bids can be modified."
                )
            if new_message is not None:
                current.message = new_message
            if new_price is not None:
                current.proposed_price = new_price
            current.updated_at = _now()

        db.refresh(bid)
        return bid

    def withdraw_bid(self, db: Session, *, bid_id: Any, requester_id: str) -> None:
        bid = self.get_bid(db, bid_id)
        require_bid_author(bid, requester_id, "You are not authorized to delete this bid")

        if not bid_is_withdrawable(bid.status):
            raise ValidationError("Cannot withdraw a hired bid. Please contact the gig owner.")

        with atomic(db):
            current = db.execute(
                select(Bid)
                .where(Bid.id == bid.id)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
            if current is None:
                raise NotFoundError("Bid not found")
            if not bid_is_withdrawable(current.status):
                raise ValidationError("Cannot withdraw a hired bid. Please contact the gig owner.")
            db.delete(current)

        logger.info("bid withdrawn", extra={"bid_id": str(bid_id), "freelancer_id": str(requester_id)})

    # -----------------------------------------------------------------
    # reads
    # -----------------------------------------------------------------

    def list_bids_for_gig(
        self,
        db: Session,
        *,
        gig_id: Any,
        requester_id: str,
        include_rejected: bool = False,
    ) -> Tuple[Gig, List[Bid]]:
        gig = self._get_gig(db, gig_id)
        require_gig_owner(gig, requester_id, "You are not authorized to view bids for this gig")

        stmt = (
            select(Bid)
            .where(Bid.gig_id == gig.id)
            .options(selectinload(Bid.freelancer))
            .order_by(Bid.created_at.desc())
        )
        if not include_rejected:
            stmt = stmt.where(Bid.status != BidStatus.rejected.value)

        return gig, list(db.execute(stmt).scalars().all())

    def list_my_bids(
        self,
        db: Session,
        *,
        freelancer_id: str,
        status: Optional[str] = None,
    ) -> List[Bid]:
        stmt = (
            select(Bid)
            .where(Bid.freelancer_id == _as_uuid(freelancer_id, "User"))
            .options(selectinload(Bid.gig).selectinload(Gig.owner))
            .order_by(Bid.created_at.desc())
        )
        # unknown filters are ignored rather than rejected
        if status in {s.value for s in BidStatus}:
            stmt = stmt.where(Bid.status == status)

        return list(db.execute(stmt).scalars().all())
