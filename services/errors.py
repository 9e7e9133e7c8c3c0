class DreamLabError(Exception):
    """Base class for recoverable Dream Lab failures."""


class StorageReadError(DreamLabError):
    """A persisted blob could not be read or parsed."""


class AnalysisError(DreamLabError):
    """The analysis model failed or returned an incomplete interpretation."""


class IllustrationError(DreamLabError):
    """The image model did not produce an image."""


class ChatError(DreamLabError):
    """An oracle turn failed."""
