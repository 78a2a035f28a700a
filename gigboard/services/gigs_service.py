# gigboard/services/gigs_service.py
from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session, selectinload

from gigboard.core.errors import NotFoundError, ValidationError
from gigboard.core.lifecycle import BidStatus, GigStatus, gig_is_mutable
from gigboard.core.money import parse_positive_amount
from gigboard.db.session import atomic
from gigboard.models.bid import Bid
from gigboard.models.gig import Gig
from gigboard.policies.ownership import require_gig_owner

TITLE_RANGE = (5, 100)
DESCRIPTION_RANGE = (20, 2000)
BUDGET_MESSAGE = "Budget must be a positive number"


def _now():
    return datetime.now(timezone.utc)


def _bounded(value: str, field: str, bounds: Tuple[int, int]) -> str:
    lo, hi = bounds
    text = value.strip()
    if len(text) < lo:
        raise ValidationError(f"{field} must be at least {lo} characters")
    if len(text) > hi:
        raise ValidationError(f"{field} cannot exceed {hi} characters")
    return text


class GigService:
    """
    Plain CRUD over gigs. The only lifecycle rule here is that an assigned
    gig is frozen; assigning happens in HireService.
    """

    def get(self, db: Session, gig_id: Any) -> Gig:
        try:
            gid = uuid.UUID(str(gig_id))
        except (TypeError, ValueError):
            raise NotFoundError("Gig not found")
        gig = db.get(Gig, gid)
        if not gig:
            raise NotFoundError("Gig not found")
        return gig

    def create(
        self,
        db: Session,
        *,
        owner_id: str,
        title: Optional[str],
        description: Optional[str],
        budget: Any,
    ) -> Gig:
        if not title or not description or budget in (None, ""):
            raise ValidationError("Please provide a title, description and budget")

        gig = Gig(
            title=_bounded(title, "Title", TITLE_RANGE),
            description=_bounded(description, "Description", DESCRIPTION_RANGE),
            budget=parse_positive_amount(budget, BUDGET_MESSAGE),
            owner_id=uuid.UUID(str(owner_id)),
            status=GigStatus.open.value,
        )
        with atomic(db):
            db.add(gig)
        db.refresh(gig)
        return gig

    def detail(self, db: Session, *, gig_id: Any, viewer_id: Optional[str]) -> Tuple[Gig, int, bool]:
        """Gig plus its pending bid count and whether the viewer has bid."""
        gig = self.get(db, gig_id)

        bid_count = db.execute(
            select(func.count(Bid.id)).where(
                Bid.gig_id == gig.id,
                Bid.status == BidStatus.pending.value,
            )
        ).scalar_one()

        user_has_bid = False
        if viewer_id:
            user_has_bid = db.execute(
                select(Bid.id).where(
                    Bid.gig_id == gig.id,
                    Bid.freelancer_id == uuid.UUID(str(viewer_id)),
                )
            ).first() is not None

        return gig, int(bid_count), user_has_bid

    def list_open(
        self,
        db: Session,
        *,
        search: str = "",
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Gig], Dict[str, Any]]:
        stmt = select(Gig).where(Gig.status == GigStatus.open.value)

        term = (search or "").strip()
        if term:
            like = f"%{term}%"
            stmt = stmt.where(or_(Gig.title.ilike(like), Gig.description.ilike(like)))

        total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()

        offset = (page - 1) * limit
        gigs = list(
            db.execute(
                stmt.options(selectinload(Gig.owner))
                .order_by(Gig.created_at.desc())
                .offset(offset)
                .limit(limit)
            )
            .scalars()
            .all()
        )

        pagination = {
            "currentPage": page,
            "totalPages": math.ceil(total / limit) if limit else 0,
            "totalGigs": total,
            "hasMore": offset + len(gigs) < total,
        }
        return gigs, pagination

    def list_mine(self, db: Session, *, owner_id: str, status: Optional[str] = None) -> List[Gig]:
        stmt = (
            select(Gig)
            .where(Gig.owner_id == uuid.UUID(str(owner_id)))
            .options(selectinload(Gig.owner), selectinload(Gig.hired_freelancer))
            .order_by(Gig.created_at.desc())
        )
        if status in {s.value for s in GigStatus}:
            stmt = stmt.where(Gig.status == status)
        return list(db.execute(stmt).scalars().all())

    def update(
        self,
        db: Session,
        *,
        gig_id: Any,
        requester_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
        budget: Any = None,
    ) -> Gig:
        gig = self.get(db, gig_id)
        require_gig_owner(gig, requester_id, "You are not authorized to update this gig")
        if not gig_is_mutable(gig.status):
            raise ValidationError("Cannot update an assigned gig")

        changes: Dict[str, Any] = {}
        if title:
            changes["title"] = _bounded(title, "Title", TITLE_RANGE)
        if description:
            changes["description"] = _bounded(description, "Description", DESCRIPTION_RANGE)
        if budget not in (None, ""):
            changes["budget"] = parse_positive_amount(budget, BUDGET_MESSAGE)

        if not changes:
            return gig

        with atomic(db):
            current = db.execute(
                select(Gig)
                .where(Gig.id == gig.id)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
            if current is None:
                raise NotFoundError("Gig not found")
            # a hire may have landed since the first read
            if not gig_is_mutable(current.status):
                raise ValidationError("Cannot update an assigned gig")
            for key, value in changes.items():
                setattr(current, key, value)
            current.updated_at = _now()

        db.refresh(gig)
        return gig

    def delete(self, db: Session, *, gig_id: Any, requester_id: str) -> None:
        gig = self.get(db, gig_id)
        require_gig_owner(gig, requester_id, "You are not authorized to delete this gig")
        if not gig_is_mutable(gig.status):
            raise ValidationError(
                "Cannot delete a gig that has been assigned. Please contact the freelancer"
            )

        with atomic(db):
            current = db.execute(
                select(Gig)
                .where(Gig.id == gig.id)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalar_one_or_none()
            if current is None:
                raise NotFoundError("Gig not found")
            if not gig_is_mutable(current.status):
                raise ValidationError(
                    "Cannot delete a gig that has been assigned. Please contact the freelancer"
                )
            db.execute(
                delete(Bid)
                .where(Bid.gig_id == current.id)
                .execution_options(synchronize_session=False)
            )
            db.delete(current)
