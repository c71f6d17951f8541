class TrackerError(Exception):
    """Base error carrying a machine-readable kind and a user-facing message."""

    kind = 'TrackerError'
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'kind': self.kind, 'message': self.message}


class InvalidPeriod(TrackerError):
    kind = 'InvalidPeriod'


class InvalidHabit(TrackerError):
    kind = 'InvalidHabit'


class MalformedImport(TrackerError):
    kind = 'MalformedImport'


class StorageError(TrackerError):
    kind = 'StorageError'
    status_code = 500


class StaleDocument(StorageError):
    # Another writer saved the document after we loaded it
    kind = 'StaleDocument'
    status_code = 409
