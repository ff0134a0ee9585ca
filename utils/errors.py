"""
Error taxonomy shared by the models, the API blueprint and the agenda editor.

Each error carries the HTTP status it maps to and a Spanish message that can
be shown to the user as-is:

    ValidationError  400  malformed input, rejected before any write
    NotFoundError    404  booking / slot / record absent
    ConflictError    409  record locked (delivered booking, save in progress)
    BackendError     500  database or transport failure, safe to retry
"""


class StudioError(Exception):
    """Base class for errors surfaced to API callers."""

    status = 500
    retryable = False

    def __init__(self, message: str, status: int = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status

    def to_dict(self) -> dict:
        return {'success': False, 'message': self.message}


class ValidationError(StudioError):
    status = 400


class NotFoundError(StudioError):
    status = 404


class ConflictError(StudioError):
    status = 409


class BackendError(StudioError):
    status = 500
    retryable = True


class NoPendingChangesError(ValidationError):
    """Commit requested with an empty pending diff."""

    def __init__(self, message: str = 'No hay cambios pendientes para guardar.'):
        super().__init__(message)


class CommitError(StudioError):
    """
    One or more photographers could not be saved.

    Attributes:
        failures: {photographer_id: StudioError}
        saved: {photographer_id: upserted_count} for the photographers that
            did go through in the same commit
    """

    def __init__(self, failures: dict, saved: dict = None):
        self.failures = dict(failures)
        self.saved = dict(saved or {})
        ids = ', '.join(str(pid) for pid in sorted(self.failures))
        super().__init__(f'No se pudieron guardar los cambios de agenda (fotógrafos: {ids}).')
        self.retryable = all(err.retryable for err in self.failures.values())
        statuses = {err.status for err in self.failures.values()}
        self.status = statuses.pop() if len(statuses) == 1 else 500
