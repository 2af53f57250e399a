"""Error taxonomy for crawling, parsing and identity resolution."""


class ArchiveError(Exception):
    pass


class RecordParseError(ArchiveError, ValueError):
    """Raised for a single record; never aborts a batch."""


class TableNotFound(RecordParseError):
    pass


class AssemblyTypeNotFound(RecordParseError):
    pass


class UnknownMonth(RecordParseError):
    pass


class UnexpectedBreadcrumbShape(RecordParseError):
    pass


class NavigationOrExtractionFailure(ArchiveError):
    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"{url}: {reason}" if reason else url)


class StateCorruption(ArchiveError):
    pass
