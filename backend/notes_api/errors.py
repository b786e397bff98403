"""Domain errors raised by the stores and the request handlers.

The app factory registers handlers that turn each of these into a JSON
response of the form ``{"detail": message}`` with ``status_code``.
"""


class NotesError(Exception):
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class Unauthorized(NotesError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ValidationError(NotesError):
    status_code = 400


class NotFoundError(NotesError):
    status_code = 404

    def __init__(self, message: str = "Note not found"):
        super().__init__(message)


class ConflictError(NotesError):
    status_code = 409
