from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from gigboard.schemas.auth import UserSummary
from gigboard.schemas.gigs import (
    GigResponse,
    GigSummary,
    PriceInput,
    gig_summary,
    gig_to_response,
    user_summary,
)


class BidCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gigId: Optional[str] = None
    message: Optional[str] = None
    proposedPrice: PriceInput = None


class BidUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    message: Optional[str] = None
    proposedPrice: PriceInput = None


class BidResponse(BaseModel):
    id: str
    gigId: str
    freelancerId: str
    freelancer: Optional[UserSummary] = None
    gig: Optional[GigSummary] = None
    message: str
    proposedPrice: Decimal
    status: str
    createdAt: datetime
    updatedAt: datetime


class BidEnvelope(BaseModel):
    message: str
    bid: BidResponse


class GigBidsResponse(BaseModel):
    message: str = "Bids fetched successfully"
    bids: List[BidResponse]
    gig: GigSummary


class MyBidsResponse(BaseModel):
    message: str = "Your bids fetched successfully"
    bids: List[BidResponse]


class HireResponse(BaseModel):
    message: str = "Freelancer hired successfully"
    bid: BidResponse
    gig: GigResponse
    rejectedCount: int = Field(..., ge=0)


def bid_to_response(
    bid,
    *,
    with_freelancer: bool = True,
    with_gig: bool = True,
    with_gig_owner: bool = False,
) -> BidResponse:
    return BidResponse(
        id=str(bid.id),
        gigId=str(bid.gig_id),
        freelancerId=str(bid.freelancer_id),
        freelancer=user_summary(bid.freelancer) if with_freelancer else None,
        gig=gig_summary(bid.gig, with_owner=with_gig_owner) if with_gig else None,
        message=bid.message,
        proposedPrice=bid.proposed_price,
        status=bid.status,
        createdAt=bid.created_at,
        updatedAt=bid.updated_at,
    )


def hire_to_response(result) -> HireResponse:
    return HireResponse(
        bid=bid_to_response(result.bid),
        gig=gig_to_response(result.gig, with_hired=True),
        rejectedCount=result.rejected_count,
    )
