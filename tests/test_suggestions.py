import asyncio

import pytest

from core.errors import HttpError
from core.services.suggestions import SUGGEST_TOP, CabysSuggester
from fakes import FakeCabysSource, make_entries

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_short_query_clears_without_fetching():
    source = FakeCabysSource(make_entries(20))
    suggester = CabysSuggester(source, delay_seconds=0)
    suggester.suggestions = make_entries(3)

    assert suggester.schedule(" a ") is None

    assert suggester.suggestions == []
    assert source.calls == []


@pytest.mark.asyncio
async def test_only_last_keystroke_fetches():
    source = FakeCabysSource(make_entries(20))
    suggester = CabysSuggester(source, delay_seconds=0.05)

    for partial in ("ar", "arr", "arro", "arroz"):
        suggester.schedule(partial)
    await suggester.wait()

    assert source.calls == [("arroz", SUGGEST_TOP)]
    assert len(suggester.suggestions) == SUGGEST_TOP
    assert suggester.is_open
    assert not suggester.loading


@pytest.mark.asyncio
async def test_failure_clears_suggestions():
    source = FakeCabysSource([], error=HttpError(500))
    suggester = CabysSuggester(source, delay_seconds=0)
    suggester.suggestions = make_entries(2)

    suggester.schedule("arroz")
    await suggester.wait()

    assert suggester.suggestions == []
    assert not suggester.is_open


@pytest.mark.asyncio
async def test_cancel_discards_pending_fetch():
    source = FakeCabysSource(make_entries(5))
    suggester = CabysSuggester(source, delay_seconds=0.05)

    task = suggester.schedule("arroz")
    suggester.cancel()
    await asyncio.sleep(0.1)

    assert task.cancelled()
    assert source.calls == []
    assert suggester.suggestions == []


@pytest.mark.asyncio
async def test_new_keystroke_clears_loading_of_in_flight_fetch():
    gate = asyncio.Event()

    class SlowSource:
        async def search_cabys(self, query, top):
            await gate.wait()
            return make_entries(3)

    suggester = CabysSuggester(SlowSource(), delay_seconds=0)
    suggester.schedule("arroz")
    await asyncio.sleep(0.01)
    assert suggester.loading

    suggester.schedule("arroz integral")

    assert not suggester.loading
    gate.set()
    await suggester.wait()
    assert suggester.suggestions == make_entries(3)
