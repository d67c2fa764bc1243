"""
MockTap Common Utilities

Shared utilities and helpers used across MockTap modules.
"""

from .utils import (
    CaptureLoader,
    decode_body,
    describe_type,
    filter_interesting_headers,
    normalize_headers,
)
from .url_utils import URLMatcher

__all__ = [
    'CaptureLoader',
    'decode_body',
    'describe_type',
    'filter_interesting_headers',
    'normalize_headers',
    'URLMatcher'
]
