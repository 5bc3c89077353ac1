"""
Domain errors raised by services and providers.
Each carries the HTTP status the API layer answers with.
"""


class AdminError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(AdminError):
    status_code = 400


class AuthenticationError(AdminError):
    status_code = 401


class NotFoundError(AdminError):
    status_code = 404


class CommunityNotFoundError(NotFoundError):
    def __init__(self, name: str):
        super().__init__(f'Community "{name}" not found')
        self.name = name


class StorageError(AdminError):
    """Storage bucket or remote file failure."""


class RemoteFileError(StorageError):
    """A remote file URL answered with an error status."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code
