"""Error taxonomy for the combination query pipeline."""


class CallerError(ValueError):
    """The request itself is malformed (bad range syntax, bad number)."""


class StoreError(Exception):
    """A record store or object store call failed."""


class StoreTransientError(StoreError):
    """Throughput/capacity exceeded. Safe to retry the same request."""


class StoreFatalError(StoreError):
    """Non-retryable backend failure, timeout, or exhausted retries."""


class RecordDecodeError(StoreFatalError):
    """A stored item could not be decoded into a CombinationRecord."""
