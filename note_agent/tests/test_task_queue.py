import asyncio

from note_agent.tasks.task_queue import TaskQueue


class Clock:
    """记录 sleep 调用的假时钟，只让出一次事件循环。"""

    def __init__(self, log):
        self.log = log

    async def sleep(self, seconds):
        self.log.append(("sleep", seconds))
        await asyncio.sleep(0)


def _make_task(name, log, state, steps=3):
    async def task():
        assert state["active"] == 0, "tasks overlapped"
        state["active"] += 1
        log.append(("start", name))
        for _ in range(steps):
            await asyncio.sleep(0)
        log.append(("end", name))
        state["active"] -= 1

    return task


def test_tasks_run_fifo_without_overlap_and_with_pacing():
    log = []
    state = {"active": 0}

    async def go():
        queue = TaskQueue(delay_ms=1500, sleep=Clock(log).sleep)
        for i in range(4):
            queue.enqueue(_make_task(i, log, state))
        assert queue.running
        await queue.join()
        assert not queue.running

    asyncio.run(go())
    expected = []
    for i in range(4):
        expected += [("start", i), ("end", i), ("sleep", 1.5)]
    assert log == expected


def test_enqueue_during_drain_only_appends():
    log = []
    state = {"active": 0}

    async def go():
        queue = TaskQueue(delay_ms=0, sleep=Clock(log).sleep)
        drains = []
        original = queue._drain

        async def counting_drain():
            drains.append(1)
            await original()

        queue._drain = counting_drain

        async def spawner():
            log.append(("start", "spawner"))
            queue.enqueue(_make_task("child", log, state))
            log.append(("end", "spawner"))

        queue.enqueue(spawner)
        queue.enqueue(_make_task("second", log, state))
        await queue.join()
        return drains

    drains = asyncio.run(go())
    assert drains == [1]
    names = [name for kind, name in log if kind == "start"]
    assert names == ["spawner", "second", "child"]


def test_failing_task_does_not_stop_queue():
    log = []

    async def boom():
        log.append("boom")
        raise RuntimeError("task failed")

    async def after():
        log.append("after")

    async def go():
        queue = TaskQueue(delay_ms=0, sleep=Clock([]).sleep)
        queue.enqueue(boom)
        queue.enqueue(after)
        await queue.join()
        return queue

    queue = asyncio.run(go())
    assert log == ["boom", "after"]
    assert len(queue) == 0


def test_queue_restarts_after_going_idle():
    log = []
    state = {"active": 0}

    async def go():
        queue = TaskQueue(delay_ms=0, sleep=Clock(log).sleep)
        queue.enqueue(_make_task("a", log, state, steps=1))
        await queue.join()
        assert not queue.running
        queue.enqueue(_make_task("b", log, state, steps=1))
        assert queue.running
        await queue.aclose()

    asyncio.run(go())
    assert [n for k, n in log if k == "end"] == ["a", "b"]


def test_delay_is_read_before_each_pause():
    log = []
    delays = iter([100, 2000])

    async def noop():
        pass

    async def go():
        queue = TaskQueue(delay_ms=lambda: next(delays), sleep=Clock(log).sleep)
        queue.enqueue(noop)
        queue.enqueue(noop)
        await queue.join()

    asyncio.run(go())
    assert log == [("sleep", 0.1), ("sleep", 2.0)]


def test_join_works_under_a_new_event_loop():
    log = []
    state = {"active": 0}
    queue = TaskQueue(delay_ms=0, sleep=Clock(log).sleep)

    async def run(name):
        queue.enqueue(_make_task(name, log, state))
        await queue.join()
        assert not queue.running

    asyncio.run(run("a"))
    asyncio.run(run("b"))
    assert [e for e in log if e[0] != "sleep"] == [("start", "a"), ("end", "a"), ("start", "b"), ("end", "b")]


def test_cancelled_join_does_not_stop_drain():
    log = []
    state = {"active": 0}

    async def go():
        queue = TaskQueue(delay_ms=0, sleep=Clock(log).sleep)
        queue.enqueue(_make_task("a", log, state, steps=5))
        waiter = asyncio.ensure_future(queue.join())
        await asyncio.sleep(0)
        waiter.cancel()
        await queue.join()

    asyncio.run(go())
    assert ("end", "a") in log
