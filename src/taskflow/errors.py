"""Exceptions raised by remote store backends."""


class RemoteStoreError(Exception):
    """Base exception for remote store failures."""

    pass


class RemoteAuthError(RemoteStoreError):
    """Credentials missing, expired or rejected."""

    pass


class RemoteNotFoundError(RemoteStoreError):
    """Table or record not found."""

    pass
