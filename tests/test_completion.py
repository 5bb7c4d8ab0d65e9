"""
Completed-recipes log tests
"""
import asyncio
import pytest
from datetime import datetime, timedelta

from core.completion import CompletionLog, record_completion
from core.store import COMPLETED_RECIPES_KEY, MemoryStore, SQLiteStore


@pytest.fixture
def recipe():
    return {"id": "3", "name": "Kimchi jjigae", "time": "30 min"}


class TestRecordCompletion:

    def test_first_completion(self, recipe):
        now = datetime(2024, 5, 1, 12, 0)
        log, recorded = record_completion([], recipe, now)

        assert recorded is True
        assert len(log) == 1
        assert log[0].recipe_id == "3"
        assert log[0].snapshot["name"] == "Kimchi jjigae"
        assert log[0].completed_at == now

    def test_same_day_duplicate(self, recipe):
        log, _ = record_completion([], recipe, datetime(2024, 5, 1, 0, 5))
        new_log, recorded = record_completion(log, recipe, datetime(2024, 5, 1, 23, 55))

        assert recorded is False
        assert new_log == log

    def test_different_days(self, recipe):
        # less than 24 hours apart but on different calendar days
        log, first = record_completion([], recipe, datetime(2024, 5, 1, 23, 50))
        log, second = record_completion(log, recipe, datetime(2024, 5, 2, 0, 10))

        assert first is True
        assert second is True
        assert len(log) == 2
        assert log[0].completed_at.day == 2

    def test_other_recipe_same_day(self, recipe):
        now = datetime(2024, 5, 1, 12, 0)
        log, _ = record_completion([], recipe, now)
        log, recorded = record_completion(log, {"id": 7, "name": "Tomato pasta"}, now)

        assert recorded is True
        assert [entry.recipe_id for entry in log] == ["7", "3"]

    def test_input_log_unchanged(self, recipe):
        log, _ = record_completion([], recipe, datetime(2024, 5, 1))
        record_completion(log, recipe, datetime(2024, 5, 2))
        assert len(log) == 1


class TestCompletionLog:

    @pytest.mark.asyncio
    async def test_record_persists(self, recipe):
        store = MemoryStore()
        completions = CompletionLog(store)

        assert await completions.record(recipe, datetime(2024, 5, 1, 9)) is True
        assert await completions.record(recipe, datetime(2024, 5, 1, 21)) is False
        assert await completions.record(recipe, datetime(2024, 5, 3, 9)) is True

        assert await completions.count() == 2
        assert await completions.completion_count("3") == 2
        assert await completions.completion_count("99") == 0

        stored = await store.get(COMPLETED_RECIPES_KEY)
        assert stored[0]["completed_at"].startswith("2024-05-03")

    @pytest.mark.asyncio
    async def test_corrupt_log_reads_as_empty(self, recipe):
        store = MemoryStore({COMPLETED_RECIPES_KEY: "{not json"})
        completions = CompletionLog(store)

        assert await completions.entries() == []
        assert await completions.record(recipe) is True
        assert await completions.count() == 1

    @pytest.mark.asyncio
    async def test_malformed_entry_skipped(self, recipe):
        store = MemoryStore()
        await store.set(COMPLETED_RECIPES_KEY, [
            {"recipe_id": "1", "snapshot": {"id": "1"}, "completed_at": "2024-05-01T10:00:00"},
            {"recipe_id": "2"}
        ])

        entries = await CompletionLog(store).entries()
        assert [entry.recipe_id for entry in entries] == ["1"]


class TestCompletionLogConcurrency:

    @pytest.fixture
    async def sqlite_log(self, tmp_path):
        store = SQLiteStore(str(tmp_path / "completions.db"))
        await store.init_db()
        yield CompletionLog(store)
        await store.close()

    @pytest.mark.asyncio
    async def test_concurrent_records_all_kept(self, sqlite_log):
        now = datetime(2024, 5, 1, 12, 0)
        flags = await asyncio.gather(*[
            sqlite_log.record({"id": str(i), "name": f"Recipe {i}"}, now) for i in range(4)
        ])

        assert flags == [True, True, True, True]
        assert await sqlite_log.count() == 4

    @pytest.mark.asyncio
    async def test_concurrent_same_day_records_once(self, sqlite_log, recipe):
        now = datetime(2024, 5, 1, 12, 0)
        flags = await asyncio.gather(
            sqlite_log.record(recipe, now),
            sqlite_log.record(recipe, now + timedelta(minutes=1)),
        )

        assert sorted(flags) == [False, True]
        assert await sqlite_log.completion_count("3") == 1
