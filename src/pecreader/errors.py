"""Exceptions raised by the reader and its storage backends."""


class ReaderError(Exception):
    """Base class for all errors raised by pecreader."""


class InvalidSourceError(ReaderError):
    """The event source does not exist, cannot be opened, or is closed."""

    def __init__(self, source: str, reason: str = "does not exist or is corrupted"):
        self.source = source
        self.reason = reason
        super().__init__(f"The source '{source}' {reason}.")


class PartitionNotFoundError(ReaderError, KeyError):
    """A named partition (tree) is missing from the event store."""

    def __init__(self, partition: str, store: str):
        self.partition = partition
        self.store = store
        super().__init__(partition, store)

    def __str__(self) -> str:
        return f'Cannot find tree "{self.partition}" in file "{self.store}".'
