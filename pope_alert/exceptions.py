class PopeAlertError(Exception):
    """Base class for all errors raised by pope_alert."""


class ConfigError(PopeAlertError):
    """Raised when settings or classifier rules cannot be loaded."""


class FetchError(PopeAlertError):
    """Raised when the RSS feed cannot be fetched (transport error or non-2xx)."""


class FeedError(PopeAlertError):
    """Raised when a fetched feed does not have the structure we need."""


class MalformedFeed(FeedError):
    """Raised when no item collection can be located in the parsed feed."""


class EmptyFeed(FeedError):
    """Raised when the item collection exists but holds no entries."""


class MissingIdentifier(FeedError):
    """Raised when the newest entry has neither an id/guid nor a link."""


class NotificationError(PopeAlertError):
    """Raised when a push notification cannot be delivered."""


class MissingCredentials(NotificationError):
    """Raised before sending when the notification credentials are not configured."""


class StorageWriteError(PopeAlertError):
    """Raised when the last-seen id cannot be persisted."""
