import os
import sys
import pytest

# Ensure the backend root (containing the `scribble` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from scribble import create_app, db, socketio
from scribble.services.drawing.surface import DrawingSurface
from scribble.services.games.session import SessionController
from scribble.services.games.words import Word


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    WORDS_FILE = os.path.join(BACKEND_ROOT, 'data', 'words.json')
    # Nothing listens on the discard port, so reference fetches fail fast
    REFERENCE_IMAGE_URL = 'http://127.0.0.1:9/{seed}.png'
    REFERENCE_TIMEOUT_SEC = 0.5
    CLUE_ROUND_DURATION_SEC = 300
    CLASSIC_REVEAL_DURATION_SEC = 100
    ACCEPTANCE_THRESHOLD = 40
    CANVAS_WIDTH = 80
    CANVAS_HEIGHT = 60


class FixedScorer:
    """Scorer double returning queued accuracies (the last one repeats)."""

    def __init__(self, *values):
        self.values = list(values) or [100.0]
        self.calls = []

    def reference_url(self, seed):
        return f'https://example.test/{seed}.png'

    async def score(self, buffer, seed):
        self.calls.append(seed)
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


class MemoryStore:
    def __init__(self, high_score=0, fail=False):
        self.high_score = high_score
        self.sessions = []
        self.fail = fail

    def get_high_score(self):
        return self.high_score

    def set_high_score(self, value):
        if self.fail:
            raise RuntimeError('store offline')
        self.high_score = value

    def record_session(self, result):
        if self.fail:
            raise RuntimeError('store offline')
        self.sessions.append(result)


def make_words(difficulty='Hard', count=20, prefix='word'):
    return [Word(text=f'{prefix}{i}', clue=f'clue {i}', difficulty=difficulty) for i in range(count)]


@pytest.fixture()
def words():
    return make_words('Easy', 10, 'easy') + make_words('Medium', 14, 'medium') + make_words('Hard', 20, 'hard')


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def controller_factory(words, store):
    def _make(scorer=None, word_list=None, **kwargs):
        return SessionController(
            lambda: list(word_list if word_list is not None else words),
            scorer or FixedScorer(100.0),
            kwargs.pop('store', store),
            surface=kwargs.pop('surface', DrawingSurface(40, 30)),
            **kwargs,
        )
    return _make


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        # Ensure models are imported so tables are created
        import scribble.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass
