"""Errors surfaced to callers of the ingestion pipeline."""


class DataRootNotFoundError(FileNotFoundError):
    """The configured Claude data directory does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Claude data directory not found: {path}")
        self.path = path
