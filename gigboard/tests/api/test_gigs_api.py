import uuid

from gigboard.models import Gig
from gigboard.tests.factories import auth, create_bid, create_gig, create_user

GIG = {
    "title": "Bakery website",
    "description": "Design and build a small marketing site for a bakery.",
    "budget": 750,
}


def test_create_and_fetch_gig(client, db):
    owner = create_user(db, "Olivia Owner")

    r = client.post("/api/v1/gigs", json=GIG, headers=auth(owner))
    assert r.status_code == 201, r.text
    gig = r.json()["gig"]
    assert gig["status"] == "open"
    assert gig["ownerId"] == str(owner.id)
    assert gig["owner"]["name"] == "Olivia Owner"

    r = client.get(f"/api/v1/gigs/{gig['id']}")
    assert r.status_code == 200
    detail = r.json()["gig"]
    assert detail["bidCount"] == 0
    assert detail["userHasBid"] is False


def test_create_requires_auth_and_valid_fields(client, db):
    owner = create_user(db)
    assert client.post("/api/v1/gigs", json=GIG).status_code in (401, 403)

    r = client.post("/api/v1/gigs", json={**GIG, "budget": -1}, headers=auth(owner))
    assert r.status_code == 400
    assert r.json() == {"detail": "Budget must be a positive number", "code": "validation_error"}


def test_listing_shows_only_open_gigs(client, db):
    owner = create_user(db)
    create_gig(db, owner, title="Logo design open", minutes=1)
    create_gig(db, owner, title="Logo design taken", status="assigned", minutes=2)

    r = client.get("/api/v1/gigs", params={"search": "logo", "limit": 10})
    assert r.status_code == 200
    body = r.json()
    assert [g["title"] for g in body["gigs"]] == ["Logo design open"]
    assert body["pagination"] == {"currentPage": 1, "totalPages": 1, "totalGigs": 1, "hasMore": False}


def test_detail_reports_viewer_bid(client, db):
    owner = create_user(db)
    fred = create_user(db, "Fred")
    gig = create_gig(db, owner)
    create_bid(db, gig, fred)

    r = client.get(f"/api/v1/gigs/{gig.id}", headers=auth(fred))
    assert r.json()["gig"]["userHasBid"] is True
    assert r.json()["gig"]["bidCount"] == 1

    # a broken token on a public route is just anonymous
    r = client.get(f"/api/v1/gigs/{gig.id}", headers={"Authorization": "Bearer nope"})
    assert r.status_code == 200
    assert r.json()["gig"]["userHasBid"] is False


def test_missing_gig_is_404(client):
    r = client.get(f"/api/v1/gigs/{uuid.uuid4()}")
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


def test_my_gigs(client, db):
    owner = create_user(db)
    create_gig(db, owner, title="Mine, still open", minutes=1)
    create_gig(db, owner, title="Mine, assigned", status="assigned", minutes=2)
    create_gig(db, create_user(db), title="Someone else's gig")

    r = client.get("/api/v1/gigs/my-gigs", headers=auth(owner))
    assert r.status_code == 200
    assert [g["title"] for g in r.json()["gigs"]] == ["Mine, assigned", "Mine, still open"]

    r = client.get("/api/v1/gigs/my-gigs", params={"status": "open"}, headers=auth(owner))
    assert [g["title"] for g in r.json()["gigs"]] == ["Mine, still open"]


def test_update_and_delete(client, db, fresh):
    owner = create_user(db)
    stranger = create_user(db)
    gig = create_gig(db, owner)
    gig_id = str(gig.id)

    r = client.patch(f"/api/v1/gigs/{gig_id}", json={"title": "Hijacked!"}, headers=auth(stranger))
    assert r.status_code == 403

    r = client.patch(f"/api/v1/gigs/{gig_id}", json={"budget": "1200"}, headers=auth(owner))
    assert r.status_code == 200
    assert r.json()["gig"]["budget"] == "1200.00"

    r = client.delete(f"/api/v1/gigs/{gig_id}", headers=auth(owner))
    assert r.status_code == 200
    assert fresh().get(Gig, gig.id) is None


def test_assigned_gig_is_frozen(client, db):
    owner = create_user(db)
    gig = create_gig(db, owner, status="assigned")

    r = client.patch(f"/api/v1/gigs/{gig.id}", json={"title": "New title here"}, headers=auth(owner))
    assert r.status_code == 400
    r = client.delete(f"/api/v1/gigs/{gig.id}", headers=auth(owner))
    assert r.status_code == 400
