"""Tests for KeyedMutex."""

import asyncio

import pytest

from origination.locking import KeyedMutex


class TestKeyedMutex:
    @pytest.mark.asyncio
    async def test_same_key_is_serialized(self) -> None:
        mutex = KeyedMutex()
        events: list[str] = []

        async def worker(name: str) -> None:
            async with mutex.acquire(("tenant", "applicant")):
                events.append(f"{name}-in")
                await asyncio.sleep(0)
                events.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert events == ["a-in", "a-out", "b-in", "b-out"]

    @pytest.mark.asyncio
    async def test_different_keys_do_not_wait(self) -> None:
        mutex = KeyedMutex()
        release = asyncio.Event()
        entered: list[str] = []

        async def holder() -> None:
            async with mutex.acquire("curp"):
                entered.append("curp")
                await release.wait()

        task = asyncio.create_task(holder())
        await asyncio.sleep(0)
        async with mutex.acquire("phone"):
            entered.append("phone")
        release.set()
        await task

        assert entered == ["curp", "phone"]

    @pytest.mark.asyncio
    async def test_idle_keys_are_dropped(self) -> None:
        mutex = KeyedMutex()

        async with mutex.acquire("curp"):
            assert len(mutex) == 1

        assert len(mutex) == 0

    @pytest.mark.asyncio
    async def test_released_when_block_raises(self) -> None:
        mutex = KeyedMutex()

        with pytest.raises(ValueError):
            async with mutex.acquire("curp"):
                raise ValueError("boom")

        assert len(mutex) == 0
        async with mutex.acquire("curp"):
            pass
