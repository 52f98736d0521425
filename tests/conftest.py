import pytest
from flatlog import create_app
from flatlog.comments import CommentStore
from flatlog.posts import PostRepository
from flatlog.security import derive_proof

PASSWORD = 'correct horse battery'
NOW = 1_700_000_000


class FrozenClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return float(self.now)


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def app(tmp_path, clock):
    app = create_app({
        'TESTING': True,
        'ADMIN_PASSWORD': PASSWORD,
        'POSTS_DIR': str(tmp_path / 'posts'),
        'COMMENTS_DIR': str(tmp_path / 'comments'),
        'HCAPTCHA_SITE_KEY': '',
        'HCAPTCHA_SECRET_KEY': '',
        'ML_BLOG_NAME': 'Test Blog',
        'CLOCK': clock,
    })
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions['flatlog']


@pytest.fixture
def proof():
    return derive_proof(PASSWORD, NOW)


@pytest.fixture
def store(tmp_path):
    return CommentStore(str(tmp_path / 'comments'))


@pytest.fixture
def repo(tmp_path, store):
    return PostRepository(str(tmp_path / 'posts'), comments=store)
