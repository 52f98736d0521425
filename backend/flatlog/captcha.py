# hCaptcha check for visitor comments, skipped entirely when no keys are configured

import logging
import requests
from .errors import ChallengeFailure, ChallengeUnavailable

PLACEHOLDER_KEYS = {
    'YOUR_SITE_KEY_(LEAVE_BLANK_IF_NOT_USED)',
    'YOUR_SECRET_KEY_(LEAVE_BLANK_IF_NOT_USED)',
}


class ChallengeVerifier:
    def __init__(self, site_key: str, secret_key: str, verify_url: str, timeout: float = 10):
        self.site_key = (site_key or '').strip()
        self.secret_key = (secret_key or '').strip()
        self.verify_url = verify_url
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        keys = (self.site_key, self.secret_key)
        return all(keys) and not any(k in PLACEHOLDER_KEYS for k in keys)

    def check(self, token):
        if not self.enabled:
            return
        if not token:
            raise ChallengeFailure('hCaptcha verification is required.')
        try:
            response = requests.post(
                self.verify_url,
                data={'secret': self.secret_key, 'response': token},
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.Timeout:
            logging.error(f'hCaptcha verification timed out after {self.timeout}s')
            raise ChallengeUnavailable()
        except (requests.exceptions.RequestException, ValueError) as e:
            logging.error(f'hCaptcha verification error: {e}')
            raise ChallengeUnavailable()
        if not isinstance(result, dict) or not result.get('success'):
            logging.info('hCaptcha rejected token')
            raise ChallengeFailure()
