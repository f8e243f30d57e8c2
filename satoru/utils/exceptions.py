"""Exception hierarchy for the scraper core.

    SatoruError (base)
    ├── NetworkError        - transport failure reaching the upstream site
    ├── HttpStatusError     - upstream answered with a non-success status
    ├── UpstreamDataError   - upstream answered with an unexpected shape
    ├── NotFoundError       - a required scalar is missing from a document
    └── ResolutionError     - a playback server yielded no usable link

``status_code`` is only read by the HTTP layer when shaping failure responses.
"""
from typing import Optional


class SatoruError(Exception):

    def __init__(self, message: str, status_code: int = 500) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


# ===========================
# Transport Errors
# ===========================
class NetworkError(SatoruError):

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        super().__init__(f"Network error for {url}: {reason}", status_code=502)


class HttpStatusError(SatoruError):

    def __init__(self, url: str, upstream_status: int, body: str = "") -> None:
        self.url = url
        self.upstream_status = upstream_status
        self.body = body
        super().__init__(f"HTTP {upstream_status} for {url}", status_code=502)


# ===========================
# Data Errors
# ===========================
class UpstreamDataError(SatoruError):

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=502)


class NotFoundError(SatoruError):

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=404)


class ResolutionError(SatoruError):

    def __init__(self, reason: str, server_id: Optional[str] = None) -> None:
        self.server_id = server_id
        super().__init__(reason, status_code=502)
