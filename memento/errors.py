"""Error kinds surfaced by the scan, activation and login flows."""


class VaultError(Exception):
    """Base class; ``code`` and ``status`` are what the API answers with."""

    code = 'vault_error'
    status = 400
    default_message = 'Request failed.'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)

    @property
    def message(self):
        return str(self)


class RecordNotFound(VaultError):
    """Tag identifier absent from the record store."""

    code = 'not_found'
    status = 404
    default_message = 'Invalid or unregistered token.'


class AlreadyActivated(VaultError):
    """Activation attempted on a record that is already active."""

    code = 'already_activated'
    status = 409
    default_message = 'This token has already been activated.'


class InvalidCredentials(VaultError):
    code = 'invalid_credentials'
    status = 401
    default_message = 'Access denied.'


class StoreUnavailable(VaultError):
    """Backend or network failure talking to the record store or cache."""

    code = 'store_unavailable'
    status = 503
    default_message = 'Record store unavailable.'

    @classmethod
    def from_exc(cls, exc: Exception) -> 'StoreUnavailable':
        """Driver error without the statement and parameters."""
        orig = getattr(exc, 'orig', None)
        text = str(orig if orig is not None else exc).strip()
        return cls(text.splitlines()[0] if text else None)
