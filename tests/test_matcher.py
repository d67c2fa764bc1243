"""
Tests for MockTap Request Matcher

Tests the suitability predicate including:
- Literal-or-pattern string comparison
- Method and URI matching
- Header subset matching
- Body matching
- Match explanations
"""

import pytest
import httpx

from mocktap.mock.matcher import MatchResult, RequestMatcher
from mocktap.mock.pattern import RequestPattern


@pytest.fixture
def matcher():
    """A fresh matcher."""
    return RequestMatcher()


@pytest.fixture
def json_request():
    """POST request with JSON body and a couple of headers."""
    return httpx.Request(
        'POST',
        'https://api.example.com/users',
        headers={
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'X-Request-Id': 'abc-123'
        },
        content=b'{"name": "John Doe"}'
    )


class TestSuitableString:
    """Test the literal-or-pattern rule."""

    def test_exact_literal(self, matcher):
        """Test identical strings match."""
        assert matcher.is_suitable_string('GET', 'GET') is True

    def test_literal_is_case_insensitive(self, matcher):
        """Test literal comparison ignores case."""
        assert matcher.is_suitable_string('GET', 'get') is True
        assert matcher.is_suitable_string('application/JSON', 'Application/json') is True

    def test_pattern_fallback(self, matcher):
        """Test expected value is tried as a regular expression."""
        assert matcher.is_suitable_string(r'/users/\d+', '/users/123') is True
        assert matcher.is_suitable_string(r'/users/\d+', '/users/abc') is False

    def test_pattern_is_anchored(self, matcher):
        """Test the pattern must cover the whole actual value."""
        assert matcher.is_suitable_string('users', 'all-users-here') is False
        assert matcher.is_suitable_string('.*users.*', 'all-users-here') is True

    def test_pattern_is_case_insensitive(self, matcher):
        """Test the pattern fallback ignores case."""
        assert matcher.is_suitable_string('bearer .+', 'Bearer token123') is True

    def test_malformed_pattern_is_non_match(self, matcher):
        """Test an invalid expression does not raise."""
        assert matcher.is_suitable_string('/users/(', '/users/1') is False
        assert matcher.is_suitable_string('[unclosed', 'x') is False

    def test_malformed_pattern_still_matches_literally(self, matcher):
        """Test literal equality is checked before compiling."""
        assert matcher.is_suitable_string('/users/(', '/USERS/(') is True

    def test_empty_strings(self, matcher):
        """Test empty expected matches only empty actual."""
        assert matcher.is_suitable_string('', '') is True
        assert matcher.is_suitable_string('', 'body') is False


class TestMethodAndUri:
    """Test method and URI checks."""

    def test_method_case_insensitive(self, matcher):
        """Test lowercase pattern method matches uppercased request method."""
        pattern = RequestPattern('get', 'https://example.com/')
        request = httpx.Request('GET', 'https://example.com/')

        assert matcher.is_suitable_method(pattern, request) is True

    def test_method_pattern(self, matcher):
        """Test method alternatives through a pattern."""
        pattern = RequestPattern('GET|HEAD', 'https://example.com/')

        assert matcher.is_suitable_method(pattern, httpx.Request('HEAD', 'https://example.com/')) is True
        assert matcher.is_suitable_method(pattern, httpx.Request('POST', 'https://example.com/')) is False

    def test_uri_pattern(self, matcher):
        """Test a URI pattern accepts any path below a prefix."""
        pattern = RequestPattern('GET', 'https://example.com/.*')
        request = httpx.Request('GET', 'https://example.com/anything')

        assert matcher.is_suitable_uri(pattern, request) is True

    def test_uri_percent_decoded(self, matcher):
        """Test both URIs are percent-decoded before comparison."""
        pattern = RequestPattern('GET', 'https://example.com/search?q=hello world')
        request = httpx.Request('GET', 'https://example.com/search?q=hello%20world')

        assert matcher.is_suitable_uri(pattern, request) is True

    def test_uri_query_pattern(self, matcher):
        """Test a pattern with an escaped query separator."""
        pattern = RequestPattern('GET', r'https://example\.com/products\?page=\d+')
        request = httpx.Request('GET', 'https://example.com/products?page=3')

        assert matcher.is_suitable_uri(pattern, request) is True

    def test_uri_mismatch(self, matcher):
        """Test different paths do not match."""
        pattern = RequestPattern('GET', 'https://example.com/users')
        request = httpx.Request('GET', 'https://example.com/orders')

        assert matcher.is_suitable_uri(pattern, request) is False


class TestHeaders:
    """Test header subset matching."""

    def test_extra_actual_headers_ignored(self, matcher, json_request):
        """Test headers only present on the request do not matter."""
        pattern = RequestPattern(
            'POST',
            'https://api.example.com/users',
            headers={'Content-Type': 'application/json'}
        )

        assert matcher.is_suitable_headers(pattern, json_request) is True

    def test_missing_header_fails(self, matcher, json_request):
        """Test a pattern header absent from the request fails."""
        pattern = RequestPattern('POST', 'https://api.example.com/users', headers={'Authorization': 'Bearer x'})

        assert matcher.is_suitable_headers(pattern, json_request) is False

    def test_header_name_case_insensitive(self, matcher, json_request):
        """Test header names compare case-insensitively."""
        pattern = RequestPattern('POST', 'https://api.example.com/users', headers={'content-type': 'application/json'})

        assert matcher.is_suitable_headers(pattern, json_request) is True

    def test_header_value_pattern(self, matcher, json_request):
        """Test header values use the literal-or-pattern rule."""
        pattern = RequestPattern('POST', 'https://api.example.com/users', headers={'X-Request-Id': '[a-z]+-\\d+'})

        assert matcher.is_suitable_headers(pattern, json_request) is True

    def test_multi_valued_header_elementwise(self, matcher):
        """Test repeated headers are compared position by position."""
        request = httpx.Request(
            'GET',
            'https://example.com/',
            headers=[('Accept', 'text/html'), ('Accept', 'application/json')]
        )

        good = RequestPattern('GET', 'https://example.com/', headers={'Accept': ['text/html', 'application/.*']})
        bad = RequestPattern('GET', 'https://example.com/', headers={'Accept': ['application/json', 'text/html']})
        too_many = RequestPattern('GET', 'https://example.com/', headers={'Accept': ['text/html', 'application/json', 'x']})

        assert matcher.is_suitable_headers(good, request) is True
        assert matcher.is_suitable_headers(bad, request) is False
        assert matcher.is_suitable_headers(too_many, request) is False

    def test_headers_diff_reports_offending_entries(self, matcher):
        """Test the diff contains only missing or unsuitable entries."""
        expected = {'Accept': ['application/json'], 'X-Token': ['abc'], 'Host': ['example.com']}
        actual = {'accept': ['text/html'], 'host': ['example.com']}

        diff = matcher.headers_diff(expected, actual)

        assert diff == {'Accept': {0: 'application/json'}, 'X-Token': ['abc']}

    def test_headers_diff_nested(self, matcher):
        """Test nested structures are compared recursively."""
        expected = {'a': {'b': ['1', '2']}}

        assert matcher.headers_diff(expected, {'a': {'b': ['1', '2', '3']}}) == {}
        assert matcher.headers_diff(expected, {'a': {'b': ['1', '9']}}) == {'a': {'b': {1: '2'}}}


class TestBody:
    """Test body matching."""

    def test_literal_body(self, matcher, json_request):
        """Test identical bodies match."""
        pattern = RequestPattern('POST', 'https://api.example.com/users', body='{"name": "John Doe"}')

        assert matcher.is_suitable_body(pattern, json_request) is True

    def test_body_case_insensitive(self, matcher, json_request):
        """Test body literal comparison ignores case."""
        pattern = RequestPattern('POST', 'https://api.example.com/users', body='{"NAME": "john doe"}')

        assert matcher.is_suitable_body(pattern, json_request) is True

    def test_body_pattern(self, matcher, json_request):
        """Test body patterns."""
        pattern = RequestPattern('POST', 'https://api.example.com/users', body='.*"name": ".+".*')

        assert matcher.is_suitable_body(pattern, json_request) is True

    def test_empty_pattern_body_requires_empty_request_body(self, matcher, json_request):
        """Test the default empty body does not accept a non-empty one."""
        pattern = RequestPattern('POST', 'https://api.example.com/users')

        assert matcher.is_suitable_body(pattern, json_request) is False


class TestSuitable:
    """Test the combined predicate."""

    def test_request_pattern_from_same_request(self, matcher, json_request):
        """Test a pattern built from a request accepts that request."""
        pattern = RequestPattern.from_request(json_request)

        assert matcher.suitable(pattern, json_request) is True

    def test_content_type_selection(self, matcher):
        """Test patterns differing only in Accept select different requests."""
        xml = RequestPattern.from_request(
            httpx.Request('GET', 'https://example.com/page', headers={'Accept': 'application/xml'})
        )
        as_json = httpx.Request('GET', 'https://example.com/page', headers={'Accept': 'application/json'})

        assert matcher.suitable(xml, as_json) is False
        assert matcher.suitable(RequestPattern.from_request(as_json), as_json) is True

    def test_explain_match(self, matcher, json_request):
        """Test explain reports a full match."""
        result = matcher.explain(RequestPattern.from_request(json_request), json_request)

        assert isinstance(result, MatchResult)
        assert result.matched is True
        assert result.reason == "Match"

    def test_explain_mismatch(self, matcher, json_request):
        """Test explain lists every failing check."""
        pattern = RequestPattern(
            'GET',
            'https://api.example.com/orders',
            headers={'Authorization': 'Bearer x'},
            body='nope'
        )

        result = matcher.explain(pattern, json_request)

        assert result.matched is False
        assert result.method_match is False
        assert result.uri_match is False
        assert result.body_match is False
        assert 'Authorization' in result.headers_diff
        assert 'method differs' in result.reason
        assert 'headers differ (Authorization)' in result.reason
