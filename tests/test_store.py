"""Tests for the SQLite store: weight activation, evaluations and view counters."""

import copy
from datetime import date, datetime, timedelta

import pytest

from maas_evaluation.core.errors import NotFoundError
from maas_evaluation.core.evaluation import evaluate
from maas_evaluation.core.models import Gender
from maas_evaluation.core.weights import DEFAULT_WEIGHT_CONFIG, parse_weight_config
from maas_evaluation.db import close_db, get_db_path, init_db
from maas_evaluation.store import (
    activate_weight_config,
    activate_weights,
    current_day,
    get_active_weights,
    get_evaluation_history,
    get_latest_tier,
    get_view_count,
    increment_view_count,
    list_weight_tables,
    needs_seed,
    prune_view_counts,
    save_evaluation,
    seed_default_weights,
)


def _v2_tables():
    config = copy.deepcopy(DEFAULT_WEIGHT_CONFIG)
    config["name"] = "v2"
    config["male"]["combinations"]["default"] = {"wealth": 0.4, "sense": 0.3, "physical": 0.3}
    return parse_weight_config(config)


async def test_database_created_in_data_dir(db):
    assert get_db_path() == db / "maas.db"
    assert get_db_path().exists()


async def test_store_reopens_under_new_data_dir(db, monkeypatch):
    other = db / "other"
    monkeypatch.setenv("DATA_DIR", str(other))
    await close_db()
    assert await init_db() == other / "maas.db"
    assert await needs_seed()
    assert (other / "maas.db").exists()


class TestWeightTables:

    async def test_no_active_table_before_seeding(self, db):
        assert await needs_seed()
        with pytest.raises(NotFoundError):
            await get_active_weights(Gender.MALE)

    async def test_seed_activates_reference_tables(self, db):
        activated = await seed_default_weights()

        assert activated == ["default/male", "default/female"]
        assert not await needs_seed()
        male = await get_active_weights(Gender.MALE)
        assert male.name == "default"
        assert male.combinations["default"] == {"wealth": 0.6, "sense": 0.3, "physical": 0.1}
        female = await get_active_weights("female")
        assert set(female.combinations) == {"default", "young"}

    async def test_activation_replaces_previous_table(self, seeded_db):
        activated = await activate_weight_config(_v2_tables().values())
        assert activated == ["v2/male", "v2/female"]

        male = await get_active_weights(Gender.MALE)
        assert male.name == "v2"
        assert male.combinations["default"]["physical"] == 0.3

        rows = await list_weight_tables()
        assert len(rows) == 4
        for gender in ("male", "female"):
            active = [r for r in rows if r["gender"] == gender and r["is_active"]]
            assert len(active) == 1
            assert active[0]["name"] == "v2"

    async def test_reactivating_an_old_version(self, seeded_db, weight_tables):
        await activate_weight_config(_v2_tables().values())
        await activate_weights(weight_tables[Gender.MALE])

        assert (await get_active_weights(Gender.MALE)).name == "default"
        assert (await get_active_weights(Gender.FEMALE)).name == "v2"
        rows = await list_weight_tables()
        assert len(rows) == 4
        assert sum(1 for r in rows if r["is_active"]) == 2

    async def test_stored_table_scores_like_the_in_memory_one(self, seeded_db, male_answers, weight_tables):
        stored = await get_active_weights(Gender.MALE)
        from_store = evaluate(Gender.MALE, male_answers, stored)
        in_memory = evaluate(Gender.MALE, male_answers, weight_tables[Gender.MALE])
        assert from_store.breakdown == in_memory.breakdown
        assert stored.categories == weight_tables[Gender.MALE].categories
        assert stored.combinations == weight_tables[Gender.MALE].combinations


class TestEvaluations:

    async def test_history_is_newest_first(self, db, male_answers, female_answers, weight_tables):
        first = evaluate(Gender.MALE, male_answers, weight_tables[Gender.MALE])
        second = evaluate(Gender.FEMALE, female_answers, weight_tables[Gender.FEMALE])
        first_id = await save_evaluation("alice", first)
        second_id = await save_evaluation("alice", second)
        await save_evaluation("bob", first)

        history = await get_evaluation_history("alice")
        assert [h["id"] for h in history] == [second_id, first_id]
        assert history[0]["tier"] == "Diamond"
        assert history[1]["category_scores"] == {"wealth": 75.0, "sense": 60.0, "physical": 85.0}
        assert await get_latest_tier("alice") == "Diamond"
        assert len(await get_evaluation_history("alice", limit=1)) == 1

    async def test_unknown_user_has_no_tier(self, db):
        assert await get_evaluation_history("nobody") == []
        assert await get_latest_tier("nobody") is None


class TestViewCounters:

    async def test_increment(self, db):
        assert await get_view_count("alice") == 0
        assert await increment_view_count("alice") == 1
        assert await increment_view_count("alice") == 2
        assert await get_view_count("alice") == 2
        assert await get_view_count("bob") == 0

    async def test_default_day_is_the_utc_day(self, db):
        assert current_day() == datetime.utcnow().date()
        await increment_view_count("alice")
        assert await get_view_count("alice", current_day()) == 1

    async def test_counts_are_per_day(self, db):
        yesterday = current_day() - timedelta(days=1)
        await increment_view_count("alice", yesterday)
        assert await get_view_count("alice") == 0
        assert await get_view_count("alice", yesterday) == 1

    async def test_prune_removes_old_counters(self, db):
        today = date(2026, 5, 20)
        await increment_view_count("alice", today - timedelta(days=10))
        await increment_view_count("alice", today - timedelta(days=3))
        await increment_view_count("alice", today)

        removed = await prune_view_counts(7, today=today)

        assert removed == 1
        assert await get_view_count("alice", today - timedelta(days=10)) == 0
        assert await get_view_count("alice", today - timedelta(days=3)) == 1
