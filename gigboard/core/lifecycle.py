"""Gig and bid lifecycles as explicit state types.

Gig:  open -> assigned            (assigned is terminal)
Bid:  pending -> hired | rejected (both terminal)

The only way a gig becomes assigned, or a bid leaves pending, is the hire
transaction; it asks this module for the target state so an illegal move
fails here instead of being written.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Set, Union

from gigboard.core.errors import InvalidTransitionError


class GigStatus(str, Enum):
    open = "open"
    assigned = "assigned"


class BidStatus(str, Enum):
    pending = "pending"
    hired = "hired"
    rejected = "rejected"


GIG_TRANSITIONS: Dict[GigStatus, Set[GigStatus]] = {
    GigStatus.open: {GigStatus.assigned},
    GigStatus.assigned: set(),
}

BID_TRANSITIONS: Dict[BidStatus, Set[BidStatus]] = {
    BidStatus.pending: {BidStatus.hired, BidStatus.rejected},
    BidStatus.hired: set(),
    BidStatus.rejected: set(),
}


def _transition(table, current, target):
    if target not in table.get(current, set()):
        raise InvalidTransitionError(
            f"Invalid transition: {current.value} -> {target.value}."
        )
    return target


def assign_gig(current: Union[GigStatus, str]) -> GigStatus:
    return _transition(GIG_TRANSITIONS, GigStatus(current), GigStatus.assigned)


def hire_bid(current: Union[BidStatus, str]) -> BidStatus:
    return _transition(BID_TRANSITIONS, BidStatus(current), BidStatus.hired)


def reject_bid(current: Union[BidStatus, str]) -> BidStatus:
    return _transition(BID_TRANSITIONS, BidStatus(current), BidStatus.rejected)


# ---------------------------------------------------------------------
# guards
# ---------------------------------------------------------------------


def gig_accepts_bids(status: Union[GigStatus, str]) -> bool:
    return GigStatus(status) == GigStatus.open


def gig_is_mutable(status: Union[GigStatus, str]) -> bool:
    # title/description/budget edits and deletion
    return GigStatus(status) == GigStatus.open


def bid_is_mutable(status: Union[BidStatus, str]) -> bool:
    return BidStatus(status) == BidStatus.pending


def bid_is_withdrawable(status: Union[BidStatus, str]) -> bool:
    return BidStatus(status) != BidStatus.hired
