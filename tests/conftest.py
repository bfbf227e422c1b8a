import random
import pytest
from flag_quiz.models import Country
from flag_quiz.services.country_pool import CountryPool
from flag_quiz.services.score_record import JsonFileStore, ScoreRecord
from flag_quiz.state import QuestionSession, SessionController

NAMES = {
    "ar": "Argentina",
    "br": "Brasil",
    "ca": "Canadá",
    "de": "Alemania",
    "es": "España",
    "fr": "Francia",
    "jp": "Japón",
    "ke": "Kenia",
    "mx": "México",
    "pe": "Perú",
}


class ManualHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Collects scheduled callbacks so tests decide when timers fire."""

    def __init__(self):
        self.handles = []

    def schedule(self, delay_seconds, callback):
        handle = ManualHandle(delay_seconds, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled]

    def fire_all(self):
        handles, self.handles = self.handles, []
        for handle in handles:
            if not handle.cancelled:
                handle.callback()


def make_country(code, name):
    return Country(code=code, name=name, image_ref=f"https://flagcdn.com/w640/{code}.webp")


@pytest.fixture
def countries():
    return [make_country(code, name) for code, name in NAMES.items()]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def pool(countries, rng):
    p = CountryPool(rng=rng)
    p.load(countries)
    return p


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def session(scheduler, rng):
    return QuestionSession(scheduler, rng=rng, delay_seconds=1.5)


@pytest.fixture
def score_record(tmp_path):
    return ScoreRecord(JsonFileStore(str(tmp_path / "best_score.json")))


@pytest.fixture
def controller(pool, session, score_record):
    return SessionController(pool=pool, session=session, score_record=score_record)
