from typing import Optional


class DirectoryError(Exception):
    """
    Base class for every error raised by the team directory pipeline.

    Fatal kinds (configuration, roster resolution, persistence) propagate to
    the CLI. The per-user kinds are logged and collected by the component
    that hit them, and the run carries on.
    """

    def __init__(self, message: str, user_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.user_id = user_id


class ConfigurationError(DirectoryError):
    pass


class RosterResolutionError(DirectoryError):
    pass


class PersistenceError(DirectoryError):
    pass


class ProfileFetchError(DirectoryError):
    pass


class AssetRetrievalError(DirectoryError):
    pass


class SlideCompositionError(DirectoryError):
    pass


class CleanupError(DirectoryError):
    pass
