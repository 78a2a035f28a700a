from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict

from gigboard.schemas.auth import UserSummary

# Loosely typed: the service owns the rules and reports them as
# ValidationError rather than a schema 422.
PriceInput = Optional[Union[Decimal, str]]


class GigCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    budget: PriceInput = None


class GigUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    description: Optional[str] = None
    budget: PriceInput = None


class GigSummary(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    budget: Decimal
    status: str
    owner: Optional[UserSummary] = None


class GigResponse(BaseModel):
    id: str
    title: str
    description: str
    budget: Decimal
    status: str
    ownerId: str
    owner: Optional[UserSummary] = None
    hiredFreelancerId: Optional[str] = None
    hiredFreelancer: Optional[UserSummary] = None
    createdAt: datetime
    updatedAt: datetime
    bidCount: Optional[int] = None
    userHasBid: Optional[bool] = None


class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalGigs: int
    hasMore: bool


class GigListResponse(BaseModel):
    message: str = "Gigs fetched successfully"
    gigs: List[GigResponse]
    pagination: Pagination


class GigEnvelope(BaseModel):
    message: str
    gig: GigResponse


class MyGigsResponse(BaseModel):
    message: str = "Your gigs fetched successfully"
    gigs: List[GigResponse]


class MessageResponse(BaseModel):
    message: str


def user_summary(user) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=str(user.id), name=user.name, email=user.email, avatar=user.avatar)


def gig_summary(gig, *, with_owner: bool = False) -> GigSummary:
    return GigSummary(
        id=str(gig.id),
        title=gig.title,
        description=gig.description,
        budget=gig.budget,
        status=gig.status,
        owner=user_summary(gig.owner) if with_owner else None,
    )


def gig_to_response(
    gig,
    *,
    bid_count: Optional[int] = None,
    user_has_bid: Optional[bool] = None,
    with_hired: bool = False,
) -> GigResponse:
    return GigResponse(
        id=str(gig.id),
        title=gig.title,
        description=gig.description,
        budget=gig.budget,
        status=gig.status,
        ownerId=str(gig.owner_id),
        owner=user_summary(gig.owner),
        hiredFreelancerId=str(gig.hired_freelancer_id) if gig.hired_freelancer_id else None,
        hiredFreelancer=user_summary(gig.hired_freelancer) if with_hired else None,
        createdAt=gig.created_at,
        updatedAt=gig.updated_at,
        bidCount=bid_count,
        userHasBid=user_has_bid,
    )
