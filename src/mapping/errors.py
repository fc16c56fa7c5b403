"""Mapping extraction exceptions."""


class MappingError(Exception):
    """Base class for errors that abort a mapping extraction."""

    pass


class SourceNotFoundError(MappingError, FileNotFoundError):
    """The editor source file does not exist or cannot be read."""

    pass


class EntryPointNotFoundError(MappingError):
    """The source has no draw routine with a block body."""

    def __init__(self, entry_point: str, origin: str | None = None):
        self.entry_point = entry_point
        self.origin = origin
        where = f" in '{origin}'" if origin else ""
        super().__init__(f"Could not locate {entry_point} method{where}")


class DocumentError(MappingError):
    """A stored mapping document cannot be read or decoded."""

    pass
