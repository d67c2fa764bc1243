"""
MockTap Transfer Stats

Snapshot handed to the on_stats hook once a call settles.
"""

from dataclasses import dataclass
from typing import Any, Optional

import httpx


@dataclass(frozen=True)
class TransferStats:
    """Immutable record of one handled request."""

    request: httpx.Request
    response: Optional[httpx.Response] = None
    transfer_time: float = 0
    handler_error_data: Any = None

    @property
    def has_response(self) -> bool:
        return self.response is not None

    @property
    def effective_uri(self) -> httpx.URL:
        return self.request.url
