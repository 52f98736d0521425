# Time-windowed admin proofs

from Crypto.Hash import SHA512
import hmac
import logging
import time
from .errors import AuthFailure

# --- Hashing ---

def sha512_hex(data: str) -> str:
    return SHA512.new(data.encode('utf-8')).hexdigest()

def derive_proof(secret: str, unix_seconds: int) -> str:
    """proof = sha512(secret + str(unix_seconds)), lowercase hex."""
    return sha512_hex(f'{secret}{int(unix_seconds)}')

# --- Verification ---

class TokenAuthenticator:
    """Accepts a proof computed for any second within +/- `window` of now.

    A captured proof stays valid for the width of the window and nothing
    stops it being replayed inside it.
    """

    def __init__(self, password: str, window: int = 5, clock=time.time):
        self._password = password
        self.window = window
        self._clock = clock

    def candidates(self):
        now = int(self._clock())
        for t in range(now - self.window, now + self.window + 1):
            yield derive_proof(self._password, t)

    def verify(self, proof) -> bool:
        if not proof or not isinstance(proof, str):
            logging.debug('Proof missing or not a string')
            return False
        supplied = proof.encode('utf-8')
        for expected in self.candidates():
            if hmac.compare_digest(expected.encode('utf-8'), supplied):
                return True
        logging.info('Admin proof rejected')
        return False

    def require(self, proof):
        if not self.verify(proof):
            raise AuthFailure()
