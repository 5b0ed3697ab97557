"""
Error taxonomy for the pass service.

Every error carries the HTTP status it maps to and a message that is safe to
show to the caller. Handlers in app.py turn them into JSON responses.
"""


class PassServiceError(Exception):
    status_code = 500
    message = 'Something went wrong. Please try again later.'

    def __init__(self, message=None, payload=None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        self.payload = payload or {}

    def to_dict(self):
        body = dict(self.payload)
        body['error'] = self.message
        return body


class ValidationError(PassServiceError):
    """Missing or malformed request fields."""
    status_code = 400
    message = 'Validation failed'

    def __init__(self, fields, message=None):
        super().__init__(message, payload={'fields': fields})
        self.fields = fields


class InvalidCredential(PassServiceError):
    """Token signature missing, malformed or not ours."""
    status_code = 401
    message = 'Invalid token!'


class LimitReached(PassServiceError):
    status_code = 403
    message = 'Entry limit reached!'


class NotFound(PassServiceError):
    status_code = 404
    message = 'Invalid QR code!'


class DuplicateEntity(PassServiceError):
    status_code = 409
    message = 'This email is already registered!'


class UpstreamFailure(PassServiceError):
    """Asset store still failing after all retries."""
    status_code = 500
    message = 'Network error: Failed to upload PDF after multiple attempts.'
