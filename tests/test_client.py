import asyncio

import pytest

from capkit.core import Capability, CapabilityChannel, CapabilityClient, CapabilityHandle, Entity
from capkit.exercises import LOCKABLE, OPENABLE

from .helpers import PING, make_pinger


def test_channel_is_bound_to_one_kind(registry, door_a, door_b):
    channel = registry.channel(LOCKABLE)
    assert isinstance(channel, CapabilityChannel)
    assert channel.kind == "lockable"
    channel.subscribe(door_a)
    channel.subscribe(door_b)
    registry.register(OPENABLE, door_a)

    assert len(channel) == 2
    assert channel.entity_ids() == ("doorA", "doorB")
    handles = channel.handles()
    assert all(isinstance(h, CapabilityHandle) for h in handles)
    assert all(h.kind == "lockable" for h in handles)

    report = channel.notify("lock")
    assert report.results == {"doorA": "locked", "doorB": "locked"}
    channel.unsubscribe(door_a)
    assert channel.entity_ids() == ("doorB",)
    assert registry.list_entities(OPENABLE) == (door_a,)


def test_channel_validates_operations_before_registration(registry):
    channel = registry.channel(LOCKABLE)
    with pytest.raises(ValueError):
        channel.notify("open")


def test_channel_rejects_foreign_definition(registry):
    other = Capability.define("lockable", "lock")
    impostor = Entity("imp", implementations={other: {"lock": lambda: "locked"}})
    with pytest.raises(ValueError, match="differently"):
        registry.channel(LOCKABLE).subscribe(impostor)


def test_client_requires_a_capability(registry):
    with pytest.raises(ValueError):
        CapabilityClient(registry)


def test_client_only_reaches_its_capability(registry, door_a):
    client = CapabilityClient(registry, PING)
    pinger = make_pinger("p", lambda: "pong")
    client.register(pinger)
    registry.register(LOCKABLE, door_a)

    assert client.kind == "ping"
    assert len(client) == 1
    assert client.notify("ping").results == {"p": "pong"}
    assert [h.entity_id for h in client.handles()] == ["p"]
    assert not hasattr(client, "registry")

    client.unregister(pinger)
    assert len(client) == 0


def test_client_anotify(registry):
    async def pong():
        return "pong"

    client = CapabilityClient(registry, PING)
    client.register(make_pinger("p", pong))
    report = asyncio.run(client.anotify("ping"))
    assert report.results == {"p": "pong"}
