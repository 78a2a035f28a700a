import asyncio

from gigboard.services.notification_service import (
    EVENT_BID_HIRED,
    ConnectionManager,
    NotificationDispatcher,
)


class FakeSocket:
    def __init__(self, fail=False):
        self.fail = fail
        self.received = []

    async def send_json(self, payload):
        if self.fail:
            raise RuntimeError("socket closed")
        self.received.append(payload)


class ExplodingNotifier:
    async def notify(self, identity, payload):
        raise ConnectionError("push backend down")


def test_notify_reaches_every_connection_of_the_user():
    mgr = ConnectionManager()
    tab1, tab2, other = FakeSocket(), FakeSocket(), FakeSocket()

    async def scenario():
        await mgr.register("u1", tab1)
        await mgr.register("u1", tab2)
        await mgr.register("u2", other)
        await mgr.notify("u1", {"event": "ping"})

    asyncio.run(scenario())

    assert tab1.received == [{"event": "ping"}]
    assert tab2.received == [{"event": "ping"}]
    assert other.received == []


def test_offline_user_is_a_no_op():
    asyncio.run(ConnectionManager().notify("nobody", {"event": "ping"}))


def test_dead_socket_is_dropped():
    mgr = ConnectionManager()
    good, dead = FakeSocket(), FakeSocket(fail=True)

    async def scenario():
        await mgr.register("u1", good)
        await mgr.register("u1", dead)
        await mgr.notify("u1", {"event": "ping"})

    asyncio.run(scenario())

    assert good.received == [{"event": "ping"}]
    assert mgr.connection_count("u1") == 1


def test_unregister_last_socket_forgets_user():
    mgr = ConnectionManager()
    ws = FakeSocket()

    async def scenario():
        await mgr.register("u1", ws)
        await mgr.unregister("u1", ws)
        await mgr.unregister("u1", ws)

    asyncio.run(scenario())
    assert mgr.connection_count("u1") == 0


def test_bid_hired_payload():
    mgr = ConnectionManager()
    ws = FakeSocket()

    async def scenario():
        await mgr.register("freelancer-1", ws)
        await NotificationDispatcher(mgr).bid_hired(
            freelancer_id="freelancer-1", gig_title="Logo design", bid_id="b-1"
        )

    asyncio.run(scenario())

    assert ws.received == [
        {
            "event": EVENT_BID_HIRED,
            "gigTitle": "Logo design",
            "bidId": "b-1",
            "message": "Congratulations! You have been hired for Logo design",
        }
    ]


def test_dispatcher_swallows_delivery_failures(caplog):
    dispatcher = NotificationDispatcher(ExplodingNotifier())

    asyncio.run(dispatcher.bid_hired(freelancer_id="f1", gig_title="Logo design", bid_id="b1"))

    assert "notification delivery failed" in caplog.text
