import pytest

from standup.errors import AppError, ErrorCode
from standup.models.impediment import ImpedimentStatus
from standup.services import impediments
from standup.utils.dates import previous_day, today_local


@pytest.mark.asyncio
async def test_upsert_overwrites_the_day(store, room, roster_of_three):
    ana = roster_of_three[0]

    first = await store.run(impediments.upsert, room.id, ana.id, ImpedimentStatus.YELLOW, "waiting on API")
    second = await store.run(impediments.upsert, room.id, ana.id, ImpedimentStatus.RED, "still blocked")

    assert first.id == second.id
    listing = await store.run(impediments.list_for_date, room.id)
    entry = listing["today_by_participant"][ana.id]
    assert entry.status == ImpedimentStatus.RED
    assert entry.description == "still blocked"


@pytest.mark.asyncio
async def test_description_rules(store, room, roster_of_three):
    ana, bea, _ = roster_of_three

    green = await store.run(impediments.upsert, room.id, ana.id, ImpedimentStatus.GREEN, "all good")
    assert green.description is None

    red = await store.run(impediments.upsert, room.id, bea.id, ImpedimentStatus.RED, "x" * 150)
    assert red.description == "x" * 100


@pytest.mark.asyncio
async def test_resolve_without_active_impediment(store, room, roster_of_three):
    ana = roster_of_three[0]
    await store.run(impediments.upsert, room.id, ana.id, ImpedimentStatus.GREEN)

    with pytest.raises(AppError) as exc_info:
        await store.run(impediments.resolve, room.id, ana.id)
    assert exc_info.value.code == ErrorCode.NOT_FOUND


@pytest.mark.asyncio
async def test_previous_day_prompt_and_resolve(store, room, roster_of_three):
    ana, bea, _ = roster_of_three
    today = today_local()
    yesterday = previous_day(today)

    blocked = await store.run(
        impediments.upsert, room.id, ana.id, ImpedimentStatus.RED, "prod is down", yesterday
    )
    await store.run(impediments.upsert, room.id, bea.id, ImpedimentStatus.GREEN, None, yesterday)

    listing = await store.run(impediments.list_for_date, room.id, today)
    assert [e.id for e in listing["previous_day_active"]] == [blocked.id]
    assert listing["today_by_participant"] == {}

    green = await store.run(impediments.resolve, room.id, ana.id)
    assert green.status == ImpedimentStatus.GREEN
    assert green.description is None
    assert green.id != blocked.id

    listing = await store.run(impediments.list_for_date, room.id, today)
    assert listing["previous_day_active"] == []
    assert listing["today_by_participant"][ana.id].status == ImpedimentStatus.GREEN
    assert await store.run(impediments.find_active, room.id, ana.id) is None


@pytest.mark.asyncio
async def test_resolve_is_atomic(store, room, roster_of_three, monkeypatch):
    ana = roster_of_three[0]
    blocked = await store.run(impediments.upsert, room.id, ana.id, ImpedimentStatus.YELLOW, "flaky CI")

    async def broken_write(*args, **kwargs):
        raise RuntimeError("write failed")

    monkeypatch.setattr(impediments, "_write_day", broken_write)

    with pytest.raises(RuntimeError):
        await store.run(impediments.resolve, room.id, ana.id)

    active = await store.run(impediments.find_active, room.id, ana.id)
    assert active is not None
    assert active.id == blocked.id
    assert active.resolved_at is None


@pytest.mark.asyncio
async def test_raising_again_reactivates(store, room, roster_of_three):
    ana = roster_of_three[0]
    yesterday = previous_day(today_local())
    blocked = await store.run(impediments.upsert, room.id, ana.id, ImpedimentStatus.RED, "vpn", yesterday)
    await store.run(impediments.resolve, room.id, ana.id)

    again = await store.run(impediments.upsert, room.id, ana.id, ImpedimentStatus.RED, "vpn again", yesterday)

    assert again.id == blocked.id
    assert again.resolved_at is None
    active = await store.run(impediments.find_active, room.id, ana.id)
    assert active.id == blocked.id


def test_normalize_description():
    assert impediments.normalize_description(ImpedimentStatus.GREEN, "text") is None
    assert impediments.normalize_description(ImpedimentStatus.YELLOW, None) is None
    assert impediments.normalize_description(ImpedimentStatus.RED, "a" * 101) == "a" * 100
