class LoserPoolError(Exception):
    """Base class for errors raised by the pool services."""


class NotFoundError(LoserPoolError):
    pass


class AllocationError(LoserPoolError):
    """A pick cannot be (de)allocated as requested."""


class FeedError(LoserPoolError):
    """The external schedule feed could not be fetched or understood."""
