from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from gigboard.core.errors import AuthorizationError


@dataclass(frozen=True)
class Principal:
    """Authenticated requester, as asserted by the bearer token."""

    user_id: str
    name: str
    email: Optional[str] = None


def same_identity(a, b) -> bool:
    # ids arrive as UUID objects from the ORM and as strings from tokens
    if a is None or b is None:
        return False
    return str(a) == str(b)


def require_gig_owner(gig, requester_id: str, message: str) -> None:
    if not same_identity(gig.owner_id, requester_id):
        raise AuthorizationError(message)


def require_bid_author(bid, requester_id: str, message: str) -> None:
    if not same_identity(bid.freelancer_id, requester_id):
        raise AuthorizationError(message)
