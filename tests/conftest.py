"""Shared fixtures: fake AI collaborators, a memory-backed store and a test app."""

import base64
import io
from datetime import datetime, timezone

import pytest
from PIL import Image

from app import create_app
from config import Config
from models.dream import Analysis, Dream
from services.entitlement import EntitlementGate
from services.entity_store import EntityStore
from services.errors import ChatError, IllustrationError
from services.storage import MemoryStorage


class TestConfig(Config):
    __test__ = False
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    WTF_CSRF_ENABLED = False
    GOOGLE_API_KEY = "test-key"
    PROMO_CODE = "DREAMLAB"


def png_data_url(size=(64, 64), color=(120, 40, 200)):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, "PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


class FakeAnalyzer:
    def __init__(self, analysis=None, error=None):
        self.analysis = analysis
        self.error = error
        self.calls = []

    def analyze(self, content):
        self.calls.append(content)
        if self.error:
            raise self.error
        return self.analysis


class FakeIllustrator:
    def __init__(self, image_url=None, error=None):
        self.image_url = image_url
        self.error = error or (None if image_url else IllustrationError("no image"))
        self.calls = []

    def illustrate(self, content, mood):
        self.calls.append((content, mood))
        if self.error:
            raise self.error
        return self.image_url


class FakeOracle:
    def __init__(self, fragments=("The ", "moon ", "listens."), fail_after=None):
        self.fragments = fragments
        self.fail_after = fail_after
        self.opened = []

    def open_session(self, context):
        self.opened.append(context)
        return {"context": context}

    def send_turn(self, session, text):
        for index, fragment in enumerate(self.fragments):
            if self.fail_after is not None and index == self.fail_after:
                raise ChatError("stream interrupted")
            yield fragment
        if self.fail_after is not None and self.fail_after >= len(self.fragments):
            raise ChatError("stream interrupted")


@pytest.fixture
def analysis():
    return Analysis(
        title="The Floating City",
        summary="Flying above neon streets.",
        interpretation="A wish for freedom.",
        mood="Euphoric",
        sentiment_score=82,
        tags=["flight", "city"],
        color_hex="#8B5CF6",
    )


@pytest.fixture
def make_dream(analysis):
    def _make(dream_id, day=1, **fields):
        fields.setdefault("analysis", analysis)
        return Dream(
            id=dream_id,
            date=datetime(2024, 5, day, 8, 0, tzinfo=timezone.utc),
            content=fields.pop("content", f"Dream {dream_id}"),
            **fields,
        )
    return _make


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    return EntityStore(storage)


@pytest.fixture
def premium_gate(store):
    store.set_entitlement(True)
    return EntitlementGate(store, "DREAMLAB")


@pytest.fixture
def free_gate(store):
    return EntitlementGate(store, "DREAMLAB")


@pytest.fixture
def fake_analyzer(analysis):
    return FakeAnalyzer(analysis)


@pytest.fixture
def fake_illustrator():
    return FakeIllustrator(png_data_url())


@pytest.fixture
def fake_oracle():
    return FakeOracle()


@pytest.fixture
def app(fake_analyzer, fake_illustrator, fake_oracle):
    app = create_app(
        TestConfig,
        analyzer=fake_analyzer,
        illustrator=fake_illustrator,
        oracle=fake_oracle,
    )
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def lab(app):
    return app.extensions["dreamlab"]


@pytest.fixture
def premium(app, lab):
    with app.app_context():
        lab.gate.grant("test")
    return lab
