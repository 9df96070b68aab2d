from __future__ import annotations

import anyio
import pytest

from natsub.aio import MemoryChannel
from natsub.errors import ChannelClosedError, NatsTimeoutError


@pytest.mark.anyio
class TestMemoryChannel:
    @pytest.fixture(autouse=True)
    def setup(self):
        self.channel: MemoryChannel[int] = MemoryChannel("test")
        yield
        self.channel.close()

    async def test_fifo_order(self):
        for i in range(3):
            self.channel.push(i)
        assert len(self.channel) == 3
        assert [await self.channel.pull(0) for _ in range(3)] == [0, 1, 2]

    async def test_pull_timeout(self):
        with pytest.raises(NatsTimeoutError):
            await self.channel.pull(0)
        with pytest.raises(NatsTimeoutError):
            await self.channel.pull(0.01)

    async def test_pull_waits_for_push(self):
        async def push_later() -> None:
            await anyio.sleep(0.01)
            self.channel.push(42)

        async with anyio.create_task_group() as tg:
            tg.start_soon(push_later)
            assert await self.channel.pull(5) == 42

    async def test_close(self):
        self.channel.push(1)
        self.channel.close()
        assert self.channel.is_closed()
        with pytest.raises(ChannelClosedError):
            await self.channel.pull(0)
        with pytest.raises(ChannelClosedError):
            self.channel.push(2)

    async def test_close_wakes_pending_pull(self):
        async def close_later() -> None:
            await anyio.sleep(0.01)
            self.channel.close()

        async with anyio.create_task_group() as tg:
            tg.start_soon(close_later)
            with pytest.raises(ChannelClosedError):
                await self.channel.pull()

    async def test_drain(self):
        self.channel.push(1)
        self.channel.push(2)
        self.channel.close(drain=True)
        with pytest.raises(ChannelClosedError):
            self.channel.push(3)
        assert await self.channel.pull() == 1
        assert await self.channel.pull() == 2
        with pytest.raises(ChannelClosedError):
            await self.channel.pull()
