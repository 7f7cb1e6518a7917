import asyncio

from gigconnect.services.realtime import ConnectionManager, channel_for
from gigconnect.utils.error_handlers import StoreError


class FakeWebSocket:
    def __init__(self, *, broken: bool = False):
        self.accepted = False
        self.sent: list[dict] = []
        self.broken = broken

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(data)


def _record(sender_id, receiver_id, content):
    return {
        "id": 1,
        "sender_id": sender_id,
        "receiver_id": receiver_id,
        "content": content,
        "created_at": "2026-01-01T00:00:00",
    }


def test_connect_joins_private_channel():
    manager = ConnectionManager(store=_record)
    ws1, ws2 = FakeWebSocket(), FakeWebSocket()

    async def run():
        await manager.connect(ws1, 5)
        await manager.connect(ws2, 5)

    asyncio.run(run())
    assert ws1.accepted and ws2.accepted
    assert manager.connections(channel_for(5)) == {ws1, ws2}
    assert manager.user_id_for(ws1) == 5


def test_disconnect_leaves_other_sessions_alone():
    manager = ConnectionManager(store=_record)
    ws1, ws2 = FakeWebSocket(), FakeWebSocket()

    async def run():
        await manager.connect(ws1, 5)
        await manager.connect(ws2, 5)

    asyncio.run(run())
    manager.disconnect(ws1)
    assert manager.connections(channel_for(5)) == {ws2}
    assert manager.user_id_for(ws1) is None

    manager.disconnect(ws2)
    assert channel_for(5) not in manager.channels
    # Disconnecting twice is harmless.
    manager.disconnect(ws2)


def test_send_message_relays_then_acknowledges():
    manager = ConnectionManager(store=_record)
    alice, bob = FakeWebSocket(), FakeWebSocket()

    async def run():
        await manager.connect(alice, 1)
        await manager.connect(bob, 2)
        return await manager.send_message(alice, 2, "hi")

    record = asyncio.run(run())
    assert bob.sent == [{"event": "new_message", "data": record}]
    assert alice.sent == [{"event": "message_sent", "data": record}]


def test_store_failure_sends_error_and_no_relay():
    def failing_store(sender_id, receiver_id, content):
        raise StoreError("Failed to send message. Please try again.")

    manager = ConnectionManager(store=failing_store)
    alice, bob = FakeWebSocket(), FakeWebSocket()

    async def run():
        await manager.connect(alice, 1)
        await manager.connect(bob, 2)
        return await manager.send_message(alice, 2, "hi")

    assert asyncio.run(run()) is None
    assert bob.sent == []
    assert alice.sent == [{"event": "error", "data": {"message": "Failed to send message. Please try again."}}]


def test_unexpected_store_error_is_reported_generically():
    def exploding_store(sender_id, receiver_id, content):
        raise KeyError("driver internals")

    manager = ConnectionManager(store=exploding_store)
    alice = FakeWebSocket()

    async def run():
        await manager.connect(alice, 1)
        await manager.send_message(alice, 2, "hi")

    asyncio.run(run())
    assert alice.sent[0]["event"] == "error"
    assert "driver" not in alice.sent[0]["data"]["message"]


def test_broken_socket_is_dropped_on_send():
    manager = ConnectionManager(store=_record)
    alice, healthy, broken = FakeWebSocket(), FakeWebSocket(), FakeWebSocket(broken=True)

    async def run():
        await manager.connect(alice, 1)
        await manager.connect(healthy, 2)
        await manager.connect(broken, 2)
        await manager.send_message(alice, 2, "hi")

    asyncio.run(run())
    assert len(healthy.sent) == 1
    assert manager.connections(channel_for(2)) == {healthy}


def test_self_message_skips_sending_socket_but_reaches_other_sessions():
    manager = ConnectionManager(store=_record)
    tab1, tab2 = FakeWebSocket(), FakeWebSocket()

    async def run():
        await manager.connect(tab1, 1)
        await manager.connect(tab2, 1)
        await manager.send_message(tab1, 1, "note to self")

    asyncio.run(run())
    assert [f["event"] for f in tab1.sent] == ["message_sent"]
    assert [f["event"] for f in tab2.sent] == ["new_message"]


def test_dispatch_rejects_unknown_event():
    manager = ConnectionManager(store=_record)
    alice = FakeWebSocket()

    async def run():
        await manager.connect(alice, 1)
        await manager.dispatch(alice, '{"event": "typing", "data": {}}')

    asyncio.run(run())
    assert alice.sent == [{"event": "error", "data": {"message": "Unknown event."}}]
