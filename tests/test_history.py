"""Tests for review history stores."""

from __future__ import annotations

import asyncio

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from codementor.history import (
    HistoryStoreError,
    MemoryHistoryStore,
    RedisHistoryStore,
    make_record,
)
from codementor.models import DetectedLanguage


def record(owner: str = "ada", code: str = "x = 1"):
    return make_record(owner, code, DetectedLanguage.PYTHON, "full", "### review")


class FakeRedis:
    """In-memory stand-in for the handful of list commands the store uses."""

    def __init__(self):
        self.lists: dict[str, list[str]] = {}
        self.closed = False

    async def lpush(self, key, value):
        self.lists.setdefault(key, []).insert(0, value)
        return len(self.lists[key])

    async def ltrim(self, key, start, end):
        self.lists[key] = self.lists.get(key, [])[start:end + 1]
        return True

    async def lrange(self, key, start, end):
        items = self.lists.get(key, [])
        return items[start:] if end == -1 else items[start:end + 1]

    async def delete(self, key):
        return 1 if self.lists.pop(key, None) is not None else 0

    def pipeline(self, transaction=True):
        return FakePipeline(self)

    async def ping(self):
        return True

    async def aclose(self):
        self.closed = True


class FakePipeline:
    """Queues commands and applies them all or none on execute."""

    def __init__(self, client):
        self.client = client
        self.commands = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.commands.clear()

    def lpush(self, key, value):
        self.commands.append(("lpush", key, value))
        return self

    def ltrim(self, key, start, end):
        self.commands.append(("ltrim", key, start, end))
        return self

    async def execute(self):
        snapshot = {key: list(items) for key, items in self.client.lists.items()}
        try:
            return [await getattr(self.client, name)(*args) for name, *args in self.commands]
        except Exception:
            self.client.lists = snapshot
            raise


class DownRedis(FakeRedis):
    def __init__(self):
        super().__init__()
        self.calls = 0

    async def lpush(self, key, value):
        self.calls += 1
        raise RedisConnectionError("connection refused")

    async def lrange(self, key, start, end):
        self.calls += 1
        raise RedisConnectionError("connection refused")

    async def ping(self):
        raise RedisConnectionError("connection refused")


def test_make_record() -> None:
    first = record()
    second = record()

    assert first.id != second.id
    assert first.timestamp > 0
    assert first.language is DetectedLanguage.PYTHON
    assert first.result == "### review"


class TestMemoryHistoryStore:
    def test_most_recent_first(self) -> None:
        async def scenario():
            store = MemoryHistoryStore()
            older, newer = record(code="a"), record(code="b")
            await store.append("ada", older)
            await store.append("ada", newer)
            return await store.list("ada")

        assert [r.code for r in asyncio.run(scenario())] == ["b", "a"]

    def test_owners_are_isolated(self) -> None:
        async def scenario():
            store = MemoryHistoryStore()
            await store.append("ada", record("ada"))
            return await store.list("grace")

        assert asyncio.run(scenario()) == []

    def test_max_records(self) -> None:
        async def scenario():
            store = MemoryHistoryStore(max_records=2)
            for code in ("a", "b", "c"):
                await store.append("ada", record(code=code))
            return await store.list("ada")

        assert [r.code for r in asyncio.run(scenario())] == ["c", "b"]

    def test_clear(self) -> None:
        async def scenario():
            store = MemoryHistoryStore()
            await store.append("ada", record())
            await store.clear("ada")
            await store.clear("nobody")
            return await store.list("ada")

        assert asyncio.run(scenario()) == []


class TestRedisHistoryStore:
    def test_round_trip_through_list(self) -> None:
        client = FakeRedis()

        async def scenario():
            store = RedisHistoryStore(client, max_records=2)
            for code in ("a", "b", "c"):
                await store.append("ada", record(code=code))
            return await store.list("ada")

        records = asyncio.run(scenario())
        assert [r.code for r in records] == ["c", "b"]
        assert list(client.lists) == ["codementor:history:ada"]

    def test_skips_unreadable_entries(self) -> None:
        client = FakeRedis()
        client.lists["codementor:history:ada"] = ["not json", record().model_dump_json()]

        records = asyncio.run(RedisHistoryStore(client).list("ada"))
        assert len(records) == 1

    def test_clear_and_close(self) -> None:
        client = FakeRedis()

        async def scenario():
            store = RedisHistoryStore(client)
            await store.append("ada", record())
            await store.clear("ada")
            listed = await store.list("ada")
            await store.close()
            return listed

        assert asyncio.run(scenario()) == []
        assert client.closed is True

    def test_connection_errors_are_retried_then_wrapped(self) -> None:
        client = DownRedis()
        store = RedisHistoryStore(client)

        with pytest.raises(HistoryStoreError) as excinfo:
            asyncio.run(store.append("ada", record()))

        assert client.calls == 3
        assert excinfo.value.owner == "ada"

    def test_push_retry_does_not_duplicate(self) -> None:
        class FlakyTrim(FakeRedis):
            trims = 0

            async def ltrim(self, key, start, end):
                FlakyTrim.trims += 1
                if FlakyTrim.trims == 1:
                    raise RedisTimeoutError("timed out")
                return await super().ltrim(key, start, end)

        client = FlakyTrim()

        async def scenario():
            store = RedisHistoryStore(client, max_records=10)
            await store.append("ada", record())
            return await store.list("ada")

        assert len(asyncio.run(scenario())) == 1
        assert FlakyTrim.trims == 2

    def test_list_failure_is_wrapped(self) -> None:
        client = DownRedis()

        with pytest.raises(HistoryStoreError, match="Failed to load history"):
            asyncio.run(RedisHistoryStore(client).list("ada"))

    def test_command_errors_are_not_retried(self) -> None:
        class WrongType(FakeRedis):
            calls = 0

            async def lrange(self, key, start, end):
                WrongType.calls += 1
                raise ResponseError("WRONGTYPE")

        with pytest.raises(HistoryStoreError):
            asyncio.run(RedisHistoryStore(WrongType()).list("ada"))
        assert WrongType.calls == 1

    def test_ping(self) -> None:
        assert asyncio.run(RedisHistoryStore(FakeRedis()).ping()) is True
        assert asyncio.run(RedisHistoryStore(DownRedis()).ping()) is False
