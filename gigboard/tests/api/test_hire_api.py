import pytest
from starlette.websockets import WebSocketDisconnect

from gigboard.main import app
from gigboard.models import Bid, Gig
from gigboard.services.notification_service import EVENT_BID_HIRED, get_notification_dispatcher
from gigboard.tests.factories import auth, create_bid, create_gig, create_user, token_for


@pytest.fixture
def market(db):
    owner = create_user(db, "Olivia Owner")
    fred = create_user(db, "Fred Freelancer")
    gina = create_user(db, "Gina Freelancer")
    gig = create_gig(db, owner, title="Logo design")
    return {
        "owner": owner,
        "fred": fred,
        "gina": gina,
        "gig": gig,
        "fred_bid": create_bid(db, gig, fred, minutes=1),
        "gina_bid": create_bid(db, gig, gina, minutes=2),
    }


def test_hire_flow(client, fresh, notifier, market):
    bid_id = market["fred_bid"].id

    r = client.patch(f"/api/v1/bids/{bid_id}/hire", headers=auth(market["owner"]))
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["message"] == "Freelancer hired successfully"
    assert body["bid"]["status"] == "hired"
    assert body["gig"]["status"] == "assigned"
    assert body["gig"]["hiredFreelancer"]["name"] == "Fred Freelancer"
    assert body["rejectedCount"] == 1

    s = fresh()
    assert s.get(Bid, market["gina_bid"].id).status == "rejected"
    assert s.get(Gig, market["gig"].id).hired_freelancer_id == market["fred"].id

    # pushed once the transaction is committed
    [(who, payload)] = notifier.events(EVENT_BID_HIRED)
    assert who == str(market["fred"].id)
    assert payload["gigTitle"] == "Logo design"
    assert payload["bidId"] == str(bid_id)


def test_second_hire_is_409_and_not_notified(client, notifier, market):
    owner = auth(market["owner"])
    assert client.patch(f"/api/v1/bids/{market['fred_bid'].id}/hire", headers=owner).status_code == 200

    r = client.patch(f"/api/v1/bids/{market['gina_bid'].id}/hire", headers=owner)
    assert r.status_code == 409
    assert r.json()["code"] == "conflict"
    assert len(notifier.events(EVENT_BID_HIRED)) == 1


def test_non_owner_cannot_hire(client, fresh, notifier, market):
    r = client.patch(f"/api/v1/bids/{market['fred_bid'].id}/hire", headers=auth(market["fred"]))
    assert r.status_code == 403
    assert fresh().get(Gig, market["gig"].id).status == "open"
    assert notifier.sent == []


def test_hire_unknown_bid(client, market):
    r = client.patch("/api/v1/bids/not-a-bid/hire", headers=auth(market["owner"]))
    assert r.status_code == 404


def test_assigned_gig_refuses_bids_and_edits(client, db, market):
    owner = auth(market["owner"])
    client.patch(f"/api/v1/bids/{market['fred_bid'].id}/hire", headers=owner)

    latecomer = create_user(db, "Late Larry")
    r = client.post(
        "/api/v1/bids",
        json={"gigId": str(market["gig"].id), "message": "Can I still join in?", "proposedPrice": 10},
        headers=auth(latecomer),
    )
    assert r.status_code == 400

    r = client.patch(
        f"/api/v1/bids/{market['gina_bid'].id}", json={"proposedPrice": 5}, headers=auth(market["gina"])
    )
    assert r.status_code == 400

    r = client.delete(f"/api/v1/bids/{market['fred_bid'].id}", headers=auth(market["fred"]))
    assert r.status_code == 400


def test_hired_freelancer_gets_live_push(client, market):
    # use the real socket registry instead of the recording notifier
    app.dependency_overrides.pop(get_notification_dispatcher)
    fred_token = token_for(market["fred"])

    with client.websocket_connect(f"/api/v1/notifications/ws?token={fred_token}") as ws:
        r = client.patch(f"/api/v1/bids/{market['fred_bid'].id}/hire", headers=auth(market["owner"]))
        assert r.status_code == 200
        payload = ws.receive_json()

    assert payload["event"] == EVENT_BID_HIRED
    assert payload["message"] == "Congratulations! You have been hired for Logo design"


def test_socket_without_valid_token_is_refused(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/api/v1/notifications/ws?token=garbage"):
            pass
    assert exc.value.code == 1008
