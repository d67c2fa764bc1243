"""
MockTap Capture Fixtures

Builds expectations from recorded capture files, so recorded traffic can be
replayed to a client under test.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import httpx

from .pattern import RequestPattern
from ..common import CaptureLoader, filter_interesting_headers

logger = logging.getLogger("mocktap.fixtures")


def capture_to_expectation(
    capture: Dict[str, Any],
    interesting_headers_only: bool = True
) -> Tuple[RequestPattern, httpx.Response]:
    """
    Convert one capture into a (pattern, response) pair.

    Capture fields: method, url, req_headers, req_body, status, resp_headers,
    resp_body. A resp_body that is not a string (parsed JSON in YAML files) is
    serialised back to JSON.

    Args:
        capture: Capture dictionary
        interesting_headers_only: Drop incidental request headers from the pattern

    Returns:
        (RequestPattern, httpx.Response)
    """
    req_headers = capture.get('req_headers') or {}
    if interesting_headers_only:
        req_headers = filter_interesting_headers(req_headers)

    pattern = RequestPattern(
        method=capture['method'],
        url=capture['url'],
        headers=req_headers,
        body=capture.get('req_body') or ''
    )

    resp_body = capture.get('resp_body')
    if resp_body is None:
        resp_body = ''
    elif not isinstance(resp_body, (str, bytes)):
        resp_body = json.dumps(resp_body)

    # Content-Length / Transfer-Encoding describe the captured wire framing
    headers_to_skip = {'content-length', 'transfer-encoding', 'content-encoding'}
    resp_headers = {
        k: v for k, v in (capture.get('resp_headers') or {}).items()
        if k.lower() not in headers_to_skip
    }

    response = httpx.Response(
        status_code=int(capture.get('status', 200)),
        headers=resp_headers,
        content=resp_body.encode('utf-8') if isinstance(resp_body, str) else resp_body
    )
    return pattern, response


def load_expectations(
    file_path: Union[str, Path],
    interesting_headers_only: bool = True
) -> List[Tuple[RequestPattern, httpx.Response]]:
    """
    Load (pattern, response) pairs from a capture file.

    Args:
        file_path: JSON or YAML capture file
        interesting_headers_only: Drop incidental request headers from patterns

    Returns:
        Pairs in capture order

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file format is unrecognized
    """
    loader = CaptureLoader(file_path)
    captures = loader.load_and_validate()

    expectations = [capture_to_expectation(c, interesting_headers_only) for c in captures]
    logger.debug(f"Built {len(expectations)} expectations from {file_path}")
    return expectations
