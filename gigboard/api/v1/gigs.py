# gigboard/api/v1/gigs.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from gigboard.core.auth_deps import get_current_principal, get_optional_principal
from gigboard.db.session import get_db
from gigboard.policies.ownership import Principal
from gigboard.schemas.gigs import (
    GigCreate,
    GigEnvelope,
    GigListResponse,
    GigUpdate,
    MessageResponse,
    MyGigsResponse,
    Pagination,
    gig_to_response,
)
from gigboard.services.gigs_service import GigService

router = APIRouter(prefix="/gigs")


# ---------------------------------------------------------------------
# public reads
# ---------------------------------------------------------------------


@router.get("", response_model=GigListResponse)
def list_gigs(
    search: str = "",
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
):
    gigs, pagination = GigService().list_open(db, search=search, page=page, limit=limit)
    return GigListResponse(
        gigs=[gig_to_response(g) for g in gigs],
        pagination=Pagination(**pagination),
    )


# must be declared before /{gig_id}
@router.get("/my-gigs", response_model=MyGigsResponse)
def my_gigs(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    gigs = GigService().list_mine(db, owner_id=principal.user_id, status=status)
    return MyGigsResponse(gigs=[gig_to_response(g, with_hired=True) for g in gigs])


@router.get("/{gig_id}", response_model=GigEnvelope)
def get_gig(
    gig_id: str,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    gig, bid_count, user_has_bid = GigService().detail(
        db, gig_id=gig_id, viewer_id=principal.user_id if principal else None
    )
    return GigEnvelope(
        message="Gig fetched successfully",
        gig=gig_to_response(gig, bid_count=bid_count, user_has_bid=user_has_bid),
    )


# ---------------------------------------------------------------------
# owner mutations
# ---------------------------------------------------------------------


@router.post("", response_model=GigEnvelope, status_code=201)
def create_gig(
    req: GigCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    gig = GigService().create(
        db,
        owner_id=principal.user_id,
        title=req.title,
        description=req.description,
        budget=req.budget,
    )
    return GigEnvelope(message="Gig created successfully", gig=gig_to_response(gig))


@router.patch("/{gig_id}", response_model=GigEnvelope)
def update_gig(
    gig_id: str,
    req: GigUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    gig = GigService().update(
        db,
        gig_id=gig_id,
        requester_id=principal.user_id,
        title=req.title,
        description=req.description,
        budget=req.budget,
    )
    return GigEnvelope(message="Gig updated successfully", gig=gig_to_response(gig))


@router.delete("/{gig_id}", response_model=MessageResponse)
def delete_gig(
    gig_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    GigService().delete(db, gig_id=gig_id, requester_id=principal.user_id)
    return MessageResponse(message="Gig deleted successfully")
