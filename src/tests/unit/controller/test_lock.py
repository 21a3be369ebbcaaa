"""Unit tests for ReadWriteLock."""

import asyncio

from userbroker.controller.lock import ReadWriteLock


class TestReadWriteLock:
    """Tests for shared/exclusive access."""

    async def test_readers_share(self) -> None:
        """Two readers hold the lock at the same time."""
        lock = ReadWriteLock()
        both_in = asyncio.Event()
        inside = 0

        async def reader() -> None:
            nonlocal inside
            async with lock.read():
                inside += 1
                if inside == 2:
                    both_in.set()
                await asyncio.wait_for(both_in.wait(), timeout=1)

        await asyncio.gather(reader(), reader())
        assert lock.readers == 0

    async def test_writer_excludes_readers(self) -> None:
        """A reader waits until the writer releases."""
        lock = ReadWriteLock()
        order: list[str] = []
        writer_in = asyncio.Event()
        release_writer = asyncio.Event()

        async def writer() -> None:
            async with lock.write():
                writer_in.set()
                order.append("write-start")
                await release_writer.wait()
                order.append("write-end")

        async def reader() -> None:
            await writer_in.wait()
            async with lock.read():
                order.append("read")

        writer_task = asyncio.create_task(writer())
        reader_task = asyncio.create_task(reader())
        await writer_in.wait()
        await asyncio.sleep(0.01)
        assert order == ["write-start"]

        release_writer.set()
        await asyncio.gather(writer_task, reader_task)
        assert order == ["write-start", "write-end", "read"]
        assert not lock.write_locked

    async def test_writers_are_exclusive(self) -> None:
        """Writers never overlap."""
        lock = ReadWriteLock()
        active = 0
        max_active = 0

        async def writer() -> None:
            nonlocal active, max_active
            async with lock.write():
                active += 1
                max_active = max(max_active, active)
                await asyncio.sleep(0.001)
                active -= 1

        await asyncio.gather(*(writer() for _ in range(10)))
        assert max_active == 1

    async def test_waiting_writer_blocks_new_readers(self) -> None:
        """A queued writer goes before readers that arrive after it."""
        lock = ReadWriteLock()
        order: list[str] = []
        first_reader_in = asyncio.Event()
        release_first_reader = asyncio.Event()

        async def first_reader() -> None:
            async with lock.read():
                first_reader_in.set()
                await release_first_reader.wait()
                order.append("reader-1")

        async def writer() -> None:
            async with lock.write():
                order.append("writer")

        async def late_reader() -> None:
            async with lock.read():
                order.append("reader-2")

        t1 = asyncio.create_task(first_reader())
        await first_reader_in.wait()
        t2 = asyncio.create_task(writer())
        await asyncio.sleep(0.01)
        t3 = asyncio.create_task(late_reader())
        await asyncio.sleep(0.01)
        assert order == []

        release_first_reader.set()
        await asyncio.gather(t1, t2, t3)
        assert order == ["reader-1", "writer", "reader-2"]

    async def test_cancelled_writer_unblocks_readers(self) -> None:
        """Readers queued behind a cancelled writer proceed."""
        lock = ReadWriteLock()
        release_first_reader = asyncio.Event()
        first_reader_in = asyncio.Event()

        async def first_reader() -> None:
            async with lock.read():
                first_reader_in.set()
                await release_first_reader.wait()

        async def writer() -> None:
            async with lock.write():
                pass

        async def late_reader() -> str:
            async with lock.read():
                return "read"

        t1 = asyncio.create_task(first_reader())
        await first_reader_in.wait()
        t2 = asyncio.create_task(writer())
        await asyncio.sleep(0.01)
        t3 = asyncio.create_task(late_reader())
        await asyncio.sleep(0.01)

        t2.cancel()
        assert await asyncio.wait_for(t3, timeout=1) == "read"

        release_first_reader.set()
        await t1
