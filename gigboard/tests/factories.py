import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from gigboard.core.security import issue_token
from gigboard.db.session import atomic
from gigboard.models import Bid, Gig, User
from gigboard.services.auth_service import principal_for

# never verified outside the auth tests, which register through the API
DUMMY_HASH = "not-a-real-hash"

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def create_user(db, name="Test User", email=None):
    u = User(
        id=uuid.uuid4(),
        name=name,
        email=email or f"{uuid.uuid4().hex[:12]}@example.com",
        password_hash=DUMMY_HASH,
    )
    with atomic(db):
        db.add(u)
    return u


def create_gig(db, owner, title="Build a landing page", budget="500.00", status="open", minutes=0):
    ts = BASE_TIME + timedelta(minutes=minutes)
    g = Gig(
        id=uuid.uuid4(),
        title=title,
        description="A responsive landing page with a signup form and analytics.",
        budget=Decimal(budget),
        owner_id=owner.id,
        status=status,
        created_at=ts,
        updated_at=ts,
    )
    with atomic(db):
        db.add(g)
    return g


def create_bid(db, gig, freelancer, price="450.00", status="pending", minutes=0):
    ts = BASE_TIME + timedelta(minutes=minutes)
    b = Bid(
        id=uuid.uuid4(),
        gig_id=gig.id,
        freelancer_id=freelancer.id,
        message="I have built many landing pages like this one.",
        proposed_price=Decimal(price),
        status=status,
        created_at=ts,
        updated_at=ts,
    )
    with atomic(db):
        db.add(b)
    return b


def token_for(user):
    return issue_token(principal_for(user))


def auth(user):
    return {"Authorization": f"Bearer {token_for(user)}"}
