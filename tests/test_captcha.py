import pytest
import requests
from flatlog import create_app
from flatlog.captcha import ChallengeVerifier
from flatlog.errors import ChallengeFailure, ChallengeUnavailable


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.exceptions.HTTPError(f'{self.status} error')

    def json(self):
        return self.payload


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    def fake_post(url, data=None, timeout=None):
        recorded.append({'url': url, 'data': data, 'timeout': timeout})
        return FakeResponse({'success': data['response'] == 'good-token'})

    monkeypatch.setattr('flatlog.captcha.requests.post', fake_post)
    return recorded


def verifier():
    return ChallengeVerifier('site', 'secret', 'https://captcha.test/verify', timeout=3)


@pytest.mark.parametrize('site, secret', [
    ('', 'secret'),
    ('site', ''),
    ('  ', 'secret'),
    ('YOUR_SITE_KEY_(LEAVE_BLANK_IF_NOT_USED)', 'secret'),
    ('site', 'YOUR_SECRET_KEY_(LEAVE_BLANK_IF_NOT_USED)'),
])
def test_disabled_without_real_keys(site, secret, calls):
    v = ChallengeVerifier(site, secret, 'https://captcha.test/verify')
    assert not v.enabled
    v.check(None)
    assert calls == []


def test_accepts_good_token(calls):
    verifier().check('good-token')
    assert calls == [{
        'url': 'https://captcha.test/verify',
        'data': {'secret': 'secret', 'response': 'good-token'},
        'timeout': 3,
    }]


def test_rejects_missing_token_without_calling_out(calls):
    with pytest.raises(ChallengeFailure):
        verifier().check('')
    assert calls == []


def test_rejects_bad_token(calls):
    with pytest.raises(ChallengeFailure):
        verifier().check('bad-token')


def test_network_errors_are_reported_as_unavailable(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.exceptions.ConnectionError('down')

    monkeypatch.setattr('flatlog.captcha.requests.post', boom)
    with pytest.raises(ChallengeUnavailable):
        verifier().check('good-token')


def test_comment_endpoint_runs_challenge_when_configured(tmp_path, calls):
    app = create_app({
        'TESTING': True,
        'POSTS_DIR': str(tmp_path / 'posts'),
        'COMMENTS_DIR': str(tmp_path / 'comments'),
        'HCAPTCHA_SITE_KEY': 'site',
        'HCAPTCHA_SECRET_KEY': 'secret',
    })
    svc = app.extensions['flatlog']
    post = svc.posts.create('Title', 'tag', 'body')
    client = app.test_client()
    body = {'postId': str(post.id), 'name': 'n', 'text': 't', 'date': 'd'}

    assert client.post('/api/user/chat/new', json=body).status_code == 400
    assert client.post('/api/user/chat/new', json={**body, 'hcaptchaToken': 'bad-token'}).status_code == 400
    assert svc.comments.load(post.id) == []

    res = client.post('/api/user/chat/new', json={**body, 'hcaptchaToken': 'good-token'})
    assert res.status_code == 200
    assert len(svc.comments.load(post.id)) == 1
