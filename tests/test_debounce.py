import asyncio

import pytest

from search_select import Debouncer


@pytest.mark.asyncio
async def test_rapid_schedules_fire_only_the_last_query():
    fired = []
    debouncer = Debouncer(delay_ms=20)

    for query in ("a", "ab", "abc"):
        debouncer.schedule(query, fired.append)
        await asyncio.sleep(0.005)

    await debouncer.wait()
    assert fired == ["abc"]


@pytest.mark.asyncio
async def test_nothing_fires_inside_the_window():
    fired = []
    debouncer = Debouncer(delay_ms=80)
    debouncer.schedule("abc", fired.append)

    await asyncio.sleep(0.01)
    assert fired == []
    assert debouncer.pending

    await debouncer.wait()
    assert fired == ["abc"]
    assert not debouncer.pending


@pytest.mark.asyncio
async def test_cancel_drops_pending_timer():
    fired = []
    debouncer = Debouncer(delay_ms=20)
    debouncer.schedule("ma", fired.append)

    assert debouncer.cancel() is True
    await asyncio.sleep(0.05)

    assert fired == []
    assert debouncer.cancel() is False


@pytest.mark.asyncio
async def test_async_callback_is_awaited():
    seen = []

    async def callback(query):
        await asyncio.sleep(0)
        seen.append(query)

    debouncer = Debouncer(delay_ms=5)
    debouncer.schedule("ravi", callback)
    await debouncer.wait()

    assert seen == ["ravi"]


@pytest.mark.asyncio
async def test_after_ms_overrides_default_delay():
    fired = []
    debouncer = Debouncer(delay_ms=10_000)
    debouncer.schedule("now", fired.append, after_ms=0)
    await debouncer.wait()
    assert fired == ["now"]
