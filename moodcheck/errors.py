"""
Exception hierarchy shared by the store, the auth client and the view-model.
"""


class MoodCheckError(Exception):
    """Base class for all MoodCheck errors."""


class AuthError(MoodCheckError):
    """Sign-in or sign-out could not be completed."""


class StoreError(MoodCheckError):
    """A read, write or subscription against the entry store failed."""


class EntryNotFoundError(StoreError):
    """No entry exists with the requested id."""


class InvalidEntryError(StoreError):
    """The entry payload was rejected by the store."""
