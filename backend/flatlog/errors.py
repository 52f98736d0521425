# Error types raised by the stores and converted to responses in create_app


class FlatlogError(Exception):
    """Base class. `message` is safe to send to the client."""
    status_code = 500
    message = 'Internal error'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class AuthFailure(FlatlogError):
    # Wrong password and expired proof look the same from outside
    status_code = 401
    message = 'Unauthorized'

    def __init__(self):
        super().__init__()


class ValidationFailure(FlatlogError):
    status_code = 400
    message = 'Required fields are missing.'


class NotFound(FlatlogError):
    status_code = 404
    message = 'Not found'


class StorageCorruption(FlatlogError):
    """A backing record exists but cannot be parsed."""
    status_code = 500
    message = 'Stored record is unreadable'


class ChallengeFailure(FlatlogError):
    status_code = 400
    message = 'hCaptcha verification failed.'


class ChallengeUnavailable(FlatlogError):
    status_code = 502
    message = 'hCaptcha verification error.'
