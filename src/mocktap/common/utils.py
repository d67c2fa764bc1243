"""
MockTap Common Utilities

Shared helpers for body decoding, header normalisation and capture file loading.
"""

import json
import logging
from pathlib import Path
from typing import List, Dict, Any, Optional, Union, Iterable, Tuple

import yaml

logger = logging.getLogger("mocktap.common")

HeaderValues = Union[str, bytes, Iterable[Union[str, bytes]]]


def decode_body(content: Optional[Union[bytes, str]], encoding: str = 'utf-8') -> str:
    """
    Decode a message body to text.

    Undecodable bytes are replaced rather than raising, so binary bodies
    still compare (and show up in diagnostics) as text.

    Args:
        content: Raw body bytes, text, or None
        encoding: Text encoding to try

    Returns:
        Decoded body string ("" for an empty or missing body)
    """
    if not content:
        return ""
    if isinstance(content, str):
        return content
    return content.decode(encoding, errors='replace')


def _to_text(value: Union[str, bytes]) -> str:
    if isinstance(value, bytes):
        return value.decode('latin-1')
    return str(value)


def normalize_headers(headers: Any) -> Dict[str, List[str]]:
    """
    Normalise headers into an ordered name -> list of values mapping.

    Accepts httpx.Headers (repeated names are grouped), a plain mapping whose
    values are strings or lists of strings, or a list of (name, value) pairs.
    Header names keep the spelling of their first occurrence.

    Example:
        normalize_headers({'Accept': 'application/json'})
        # {'Accept': ['application/json']}
    """
    if not headers:
        return {}

    if hasattr(headers, 'multi_items') and hasattr(headers, 'raw'):
        # httpx.Headers: raw keeps the original spelling of names
        pairs: Iterable[Tuple[Any, Any]] = headers.raw
    elif hasattr(headers, 'multi_items'):
        pairs = headers.multi_items()
    elif hasattr(headers, 'items'):
        pairs = headers.items()
    else:
        pairs = headers

    normalized: Dict[str, List[str]] = {}
    lookup: Dict[str, str] = {}
    for name, value in pairs:
        name = _to_text(name)
        if isinstance(value, (str, bytes)):
            values = [_to_text(value)]
        else:
            values = [_to_text(v) for v in value]

        key = lookup.setdefault(name.lower(), name)
        normalized.setdefault(key, []).extend(values)

    return normalized


def describe_type(value: Any) -> str:
    """Describe a value's type for error messages (e.g. "str(d)", "int(5)", "dict")."""
    if value is None:
        return 'None'
    if isinstance(value, (str, int, float, bool)):
        text = repr(value)
        if len(text) > 40:
            text = text[:37] + '...'
        return f"{type(value).__name__}({text})"
    return f"{type(value).__module__}.{type(value).__qualname__}".replace('builtins.', '')


class CaptureLoader:
    """
    Standardized loader for capture files.

    Handles the supported capture layouts, as JSON or YAML (by file suffix):
    - Format 1: {"requests": [...]}  (wrapped format)
    - Format 2: {"captures": [...]}  (alternative wrapper)
    - Format 3: [...]                (direct list format)

    Example:
        loader = CaptureLoader("captures.json")
        captures = loader.load()

        for capture in captures:
            print(capture['url'])
    """

    YAML_SUFFIXES = ('.yaml', '.yml')

    def __init__(self, file_path: Union[str, Path]):
        """
        Initialize capture loader.

        Args:
            file_path: Path to capture JSON or YAML file
        """
        self.file_path = Path(file_path)

    def load(self) -> List[Dict[str, Any]]:
        """
        Load captures from file.

        Returns:
            List of capture dictionaries

        Raises:
            FileNotFoundError: If capture file doesn't exist
            ValueError: If the file format is invalid or unrecognized
        """
        if not self.file_path.exists():
            raise FileNotFoundError(f"Capture file not found: {self.file_path}")

        with open(self.file_path, 'r', encoding='utf-8') as f:
            if self.file_path.suffix.lower() in self.YAML_SUFFIXES:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)

        if isinstance(data, dict):
            if 'requests' in data:
                return data['requests']
            elif 'captures' in data:
                return data['captures']
            else:
                raise ValueError(
                    f"Unexpected format in {self.file_path}. "
                    f"Expected dict with 'requests' or 'captures' key, "
                    f"or a list of captures. Found keys: {list(data.keys())}"
                )
        elif isinstance(data, list):
            return data
        else:
            raise ValueError(
                f"Unexpected format in {self.file_path}. "
                f"Expected dict or list, got {type(data).__name__}"
            )

    def validate_capture(self, capture: Dict[str, Any]) -> bool:
        """Check that a capture has the fields needed to build an expectation."""
        required_fields = ['url', 'method']
        return isinstance(capture, dict) and all(field in capture for field in required_fields)

    def load_and_validate(self) -> List[Dict[str, Any]]:
        """
        Load captures and filter out invalid ones.

        Returns:
            List of valid capture dictionaries
        """
        captures = self.load()
        valid_captures = [c for c in captures if self.validate_capture(c)]

        if len(valid_captures) < len(captures):
            invalid_count = len(captures) - len(valid_captures)
            logger.warning(f"Skipped {invalid_count} invalid captures in {self.file_path}")

        return valid_captures


def filter_interesting_headers(
    headers: Dict[str, Any],
    additional_headers: Optional[List[str]] = None
) -> Dict[str, Any]:
    """
    Filter headers to only include the ones worth matching on.

    Captured requests carry many incidental headers (user-agent, content-length,
    connection...). Keeping them in a pattern would make it reject otherwise
    identical requests.

    Args:
        headers: Dictionary of headers to filter
        additional_headers: Optional list of additional header names to include

    Returns:
        Filtered dictionary containing only interesting headers
    """
    interesting = [
        'authorization',
        'cookie',
        'x-api-key',
        'x-auth-token',
        'x-session-id',
        'x-csrf-token',
        'x-requested-with',
        'content-type',
        'accept',
    ]

    if additional_headers:
        interesting.extend(h.lower() for h in additional_headers)

    return {k: v for k, v in headers.items() if k.lower() in interesting}
