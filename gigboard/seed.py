"""Demo data: a client with two open gigs and two freelancers bidding on them.

    python -m gigboard.seed
"""
import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from gigboard.core.security import hash_password
from gigboard.db.base import Base
from gigboard.db.session import SessionLocal, engine
from gigboard.models import Bid, Gig, User

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

USERS = [
    ("Alice Client", "alice@example.com"),
    ("Bob Builder", "bob@example.com"),
    ("Carol Coder", "carol@example.com"),
]

GIGS = [
    (
        "Build a landing page",
        "Responsive marketing landing page with a signup form and analytics.",
        Decimal("500.00"),
    ),
    (
        "Write API documentation",
        "Document twelve REST endpoints with request and response examples.",
        Decimal("250.00"),
    ),
]


def seed(db: Session) -> None:
    if db.execute(select(User.id).limit(1)).first() is not None:
        logger.info("database already seeded; skipping")
        return

    pw = hash_password(DEMO_PASSWORD)
    client, *freelancers = [User(name=n, email=e, password_hash=pw) for n, e in USERS]
    db.add_all([client, *freelancers])
    db.flush()

    for title, description, budget in GIGS:
        gig = Gig(title=title, description=description, budget=budget, owner_id=client.id)
        db.add(gig)
        db.flush()
        for i, freelancer in enumerate(freelancers):
            db.add(
                Bid(
                    gig_id=gig.id,
                    freelancer_id=freelancer.id,
                    message=f"Hi, I'm {freelancer.name} and I can deliver this within a week.",
                    proposed_price=budget - Decimal(25 * (i + 1)),
                )
            )

    db.commit()
    logger.info("seeded demo data", extra={"users": len(USERS), "gigs": len(GIGS)})


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed(db)
    finally:
        db.close()
