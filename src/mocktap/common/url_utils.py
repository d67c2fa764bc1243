"""
MockTap URL Utilities

URI normalisation used before comparing request targets.
"""

from urllib.parse import unquote
from typing import Any


class URLMatcher:
    """Handles URI decoding for comparison."""

    @staticmethod
    def decode_uri(uri: Any) -> str:
        """
        Percent-decode a URI for comparison.

        `+` is left alone so that regular expression quantifiers in URI
        patterns survive decoding.

        Args:
            uri: URI string or URL object (anything with a string form)

        Returns:
            Decoded URI string
        """
        return unquote(str(uri))
