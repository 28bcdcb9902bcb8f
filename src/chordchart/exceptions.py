class ChordChartError(Exception):
    """Base exception for chordchart."""


class FetchError(ChordChartError):
    """Raised when an HTTP request for a catalog fails."""

    def __init__(self, url: str, status_code: int):
        self.url = url
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} fetching {url}")


class CatalogError(ChordChartError):
    """Raised when a catalog source cannot be read or has the wrong shape."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Catalog error for {source}: {reason}")
