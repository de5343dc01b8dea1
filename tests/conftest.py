import pytest
import pytest_asyncio

from maas_evaluation.core.models import Answer
from maas_evaluation.core.weights import default_weight_tables
from maas_evaluation.db import close_db, init_db
from maas_evaluation.store import seed_default_weights


@pytest.fixture
def weight_tables():
    """Reference weight tables keyed by gender."""
    return default_weight_tables()


@pytest.fixture
def male_answers():
    """A complete male questionnaire.

    wealth 40 + 15 + 20 = 75, sense 25 + 15 + 20 = 60, physical 40 + 30 + 15 = 85,
    so the aggregate is 75 * 0.6 + 60 * 0.3 + 85 * 0.1 = 71.5.
    """
    return [
        Answer(question_id="income", value=8500),
        Answer(question_id="assets", value=12500),
        Answer(question_id="job_stability", value=20),
        Answer(question_id="social_intelligence", value=25),
        Answer(question_id="humor", value=15),
        Answer(question_id="positivity", value=20),
        Answer(question_id="height", value=175),
        Answer(question_id="weight", value=70),
        Answer(question_id="exercise", value=30),
        Answer(question_id="style", value=15),
    ]


@pytest.fixture
def female_answers():
    """A complete female questionnaire.

    age 95, appearance 40 + 20 + 15 = 75, values 30 + 20 + 20 = 70.
    """
    return [
        Answer(question_id="age", value=28),
        Answer(question_id="attractiveness", value=40),
        Answer(question_id="body_management", value=20),
        Answer(question_id="style_atmosphere", value=15),
        Answer(question_id="emotional_stability", value=30),
        Answer(question_id="rational_thinking", value=20),
        Answer(question_id="family_values", value=20),
        Answer(question_id="height", value=165),
        Answer(question_id="weight", value=55),
    ]


@pytest_asyncio.fixture
async def db(tmp_path, monkeypatch):
    """A fresh SQLite database in a temporary DATA_DIR."""
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    await close_db()
    await init_db()
    yield tmp_path
    await close_db()


@pytest_asyncio.fixture
async def seeded_db(db):
    """Database with the reference weight tables active."""
    await seed_default_weights()
    return db
