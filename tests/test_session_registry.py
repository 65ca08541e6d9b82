# tests/test_session_registry.py
import asyncio
from typing import Dict, Optional

import pytest

from qjob_tracker.sessions.registry import (
    InMemorySessionRegistry,
    RedisSessionRegistry,
    create_session_registry,
)


class FakeRedisHashClient:
    """Just enough of redis.asyncio.Redis for hash-backed registries."""

    def __init__(self):
        self.hashes: Dict[str, Dict[str, bytes]] = {}
        self.closed = False

    async def ping(self):
        return True

    async def hset(self, key, field, value):
        self.hashes.setdefault(key, {})[field] = value
        return 1

    async def hget(self, key, field) -> Optional[bytes]:
        return self.hashes.get(key, {}).get(field)

    async def hdel(self, key, *fields):
        removed = [self.hashes.get(key, {}).pop(field, None) for field in fields]
        return sum(1 for value in removed if value is not None)

    async def hgetall(self, key):
        return dict(self.hashes.get(key, {}))

    async def aclose(self):
        self.closed = True


@pytest.fixture(params=["memory", "redis"])
async def registry(request):
    if request.param == "memory":
        registry = InMemorySessionRegistry()
    else:
        registry = RedisSessionRegistry(hash_key="test:sessions", redis_client=FakeRedisHashClient())
    await registry.initialize()
    yield registry
    await registry.teardown()


async def test_connect_registers_unauthenticated_session(registry):
    session = await registry.connect("conn-1")

    assert session.connection_id == "conn-1"
    assert not session.is_authenticated
    assert (await registry.get_session("conn-1")).user_id is None
    assert await registry.get_user_id("conn-1") is None


async def test_last_auth_wins(registry):
    await registry.connect("conn-1")
    await registry.authenticate("conn-1", "u1")
    await registry.authenticate("conn-1", "u2")

    assert await registry.get_user_id("conn-1") == "u2"


async def test_reauth_keeps_connected_at(registry):
    connected = await registry.connect("conn-1")
    await registry.authenticate("conn-1", "u1")

    assert (await registry.get_session("conn-1")).connected_at == connected.connected_at


async def test_disconnect_removes_binding_in_any_state(registry):
    await registry.connect("anon")
    await registry.connect("authed")
    await registry.authenticate("authed", "u1")

    await registry.disconnect("anon")
    await registry.disconnect("authed")

    assert await registry.get_session("anon") is None
    assert await registry.get_session("authed") is None
    assert await registry.list_sessions() == []


async def test_disconnect_of_unknown_connection_is_a_no_op(registry):
    await registry.disconnect("never-seen")
    assert await registry.list_sessions() == []


async def test_auth_does_not_check_the_user_exists(registry):
    await registry.connect("conn-1")
    session = await registry.authenticate("conn-1", "no-such-user")

    assert session.user_id == "no-such-user"


async def test_bindings_are_per_connection(registry):
    await registry.connect("conn-1")
    await registry.connect("conn-2")
    await registry.authenticate("conn-1", "u1")
    await registry.authenticate("conn-2", "u1")

    sessions = {s.connection_id: s.user_id for s in await registry.list_sessions()}
    assert sessions == {"conn-1": "u1", "conn-2": "u1"}


async def test_concurrent_events_leave_a_consistent_map():
    registry = InMemorySessionRegistry()
    connection_ids = [f"conn-{i}" for i in range(50)]

    await asyncio.gather(*(registry.connect(cid) for cid in connection_ids))
    await asyncio.gather(*(registry.authenticate(cid, f"user-{cid}") for cid in connection_ids))
    await asyncio.gather(*(registry.disconnect(cid) for cid in connection_ids[::2]))

    remaining = {s.connection_id: s.user_id for s in await registry.list_sessions()}
    assert remaining == {cid: f"user-{cid}" for cid in connection_ids[1::2]}


async def test_redis_teardown_closes_client():
    client = FakeRedisHashClient()
    registry = RedisSessionRegistry(redis_client=client)
    await registry.initialize()
    await registry.teardown()

    assert client.closed
    with pytest.raises(RuntimeError):
        await registry.get_session("conn-1")


async def test_redis_teardown_removes_only_this_process_sessions():
    client = FakeRedisHashClient()
    other_process = RedisSessionRegistry(hash_key="test:sessions", redis_client=client)
    this_process = RedisSessionRegistry(hash_key="test:sessions", redis_client=client)

    await other_process.connect("remote-1")
    await this_process.connect("local-1")
    await this_process.authenticate("local-2", "user-b")
    await this_process.connect("local-3")
    await this_process.disconnect("local-3")

    await this_process.teardown()

    assert set(client.hashes["test:sessions"]) == {"remote-1"}
    assert client.closed


def test_factory_selects_backend():
    assert isinstance(create_session_registry("memory"), InMemorySessionRegistry)
    assert isinstance(create_session_registry("redis"), RedisSessionRegistry)
    with pytest.raises(ValueError):
        create_session_registry("memcached")
