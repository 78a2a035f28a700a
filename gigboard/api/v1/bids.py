# gigboard/api/v1/bids.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from gigboard.core.auth_deps import get_current_principal
from gigboard.core.rate_limit import limit_bid_submissions
from gigboard.db.session import get_db
from gigboard.policies.ownership import Principal
from gigboard.schemas.bids import (
    BidCreate,
    BidEnvelope,
    BidUpdate,
    GigBidsResponse,
    HireResponse,
    MyBidsResponse,
    bid_to_response,
    hire_to_response,
)
from gigboard.schemas.gigs import MessageResponse, gig_summary
from gigboard.services.bids_service import BidService
from gigboard.services.hire_service import HireService
from gigboard.services.notification_service import (
    NotificationDispatcher,
    get_notification_dispatcher,
)

router = APIRouter(prefix="/bids")


@router.post(
    "",
    response_model=BidEnvelope,
    status_code=201,
    dependencies=[Depends(limit_bid_submissions)],
)
def submit_bid(
    req: BidCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    bid = BidService().submit_bid(
        db,
        gig_id=req.gigId,
        freelancer_id=principal.user_id,
        message=req.message,
        proposed_price=req.proposedPrice,
    )
    # notify only after the insert has committed
    background_tasks.add_task(
        dispatcher.bid_received,
        owner_id=str(bid.gig.owner_id),
        gig_id=str(bid.gig_id),
        gig_title=bid.gig.title,
        freelancer_name=principal.name,
        bid_id=str(bid.id),
    )
    return BidEnvelope(message="Bid submitted successfully", bid=bid_to_response(bid))


# must be declared before /{gig_id}
@router.get("/my-bids", response_model=MyBidsResponse)
def my_bids(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    bids = BidService().list_my_bids(db, freelancer_id=principal.user_id, status=status)
    return MyBidsResponse(
        bids=[bid_to_response(b, with_freelancer=False, with_gig_owner=True) for b in bids]
    )


@router.get("/{gig_id}", response_model=GigBidsResponse)
def bids_for_gig(
    gig_id: str,
    includeRejected: bool = False,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    gig, bids = BidService().list_bids_for_gig(
        db,
        gig_id=gig_id,
        requester_id=principal.user_id,
        include_rejected=includeRejected,
    )
    return GigBidsResponse(
        bids=[bid_to_response(b, with_gig=False) for b in bids],
        gig=gig_summary(gig),
    )


@router.patch("/{bid_id}", response_model=BidEnvelope)
def edit_bid(
    bid_id: str,
    req: BidUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    bid = BidService().edit_bid(
        db,
        bid_id=bid_id,
        requester_id=principal.user_id,
        message=req.message,
        proposed_price=req.proposedPrice,
    )
    return BidEnvelope(message="Bid updated successfully", bid=bid_to_response(bid))


@router.delete("/{bid_id}", response_model=MessageResponse)
def withdraw_bid(
    bid_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    BidService().withdraw_bid(db, bid_id=bid_id, requester_id=principal.user_id)
    return MessageResponse(message="Bid withdrawn successfully")


@router.patch("/{bid_id}/hire", response_model=HireResponse)
def hire_freelancer(
    bid_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    result = HireService().hire(db, bid_id=bid_id, requester_id=principal.user_id)

    background_tasks.add_task(
        dispatcher.bid_hired,
        freelancer_id=str(result.bid.freelancer_id),
        gig_title=result.gig.title,
        bid_id=str(result.bid.id),
    )
    return hire_to_response(result)
