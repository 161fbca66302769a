# errors.py


class FeedUnavailable(Exception):
    """A raw data feed (wireless, neighbor table, hints, leases) could not be fetched."""


class MalformedLeaseDuration(ValueError):
    """A lease-time string does not look like ``<integer><d|h|m>``."""


class AnnotationStoreCorrupt(Exception):
    """The persisted annotation document is unreadable or not a JSON object."""
