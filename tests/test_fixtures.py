"""
Tests for MockTap Capture Fixtures

Tests building expectations from capture files including:
- JSON and YAML capture files
- Interesting header filtering
- Skipping invalid captures
"""

import json
import tempfile
from pathlib import Path

import pytest
import yaml

from mocktap.mock.fixtures import capture_to_expectation, load_expectations


@pytest.fixture
def sample_capture():
    """A captured JSON API call."""
    return {
        'method': 'POST',
        'url': 'https://api.example.com/users',
        'req_headers': {
            'Content-Type': 'application/json',
            'User-Agent': 'python-requests/2.31',
            'Content-Length': '17',
            'Authorization': 'Bearer abc'
        },
        'req_body': '{"name": "Alice"}',
        'status': 201,
        'resp_headers': {
            'Content-Type': 'application/json',
            'Content-Length': '9',
            'Transfer-Encoding': 'chunked'
        },
        'resp_body': '{"id": 1}'
    }


@pytest.fixture
def temp_dir():
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


class TestCaptureToExpectation:
    """Test converting single captures."""

    def test_pattern(self, sample_capture):
        pattern, _ = capture_to_expectation(sample_capture)

        assert pattern.method == 'POST'
        assert pattern.url == 'https://api.example.com/users'
        assert pattern.body == '{"name": "Alice"}'
        assert set(pattern.headers) == {'Content-Type', 'Authorization'}

    def test_all_headers_kept(self, sample_capture):
        pattern, _ = capture_to_expectation(sample_capture, interesting_headers_only=False)

        assert 'User-Agent' in pattern.headers
        assert 'Content-Length' in pattern.headers

    def test_response(self, sample_capture):
        _, response = capture_to_expectation(sample_capture)

        assert response.status_code == 201
        assert response.json() == {'id': 1}
        assert response.headers['content-type'] == 'application/json'
        assert 'transfer-encoding' not in response.headers

    def test_structured_body_serialised(self):
        capture = {'method': 'GET', 'url': 'https://example.com/', 'resp_body': {'ok': True}}

        _, response = capture_to_expectation(capture)

        assert response.json() == {'ok': True}
        assert response.status_code == 200

    def test_missing_body(self):
        capture = {'method': 'GET', 'url': 'https://example.com/'}

        pattern, response = capture_to_expectation(capture)

        assert pattern.body == ''
        assert response.content == b''


class TestLoadExpectations:
    """Test loading capture files."""

    def test_json_file(self, temp_dir, sample_capture):
        path = temp_dir / 'captures.json'
        path.write_text(json.dumps({'requests': [sample_capture]}))

        expectations = load_expectations(path)

        assert len(expectations) == 1
        assert expectations[0][1].status_code == 201

    def test_yaml_file(self, temp_dir, sample_capture):
        path = temp_dir / 'captures.yaml'
        path.write_text(yaml.safe_dump({'captures': [sample_capture]}))

        expectations = load_expectations(path)

        assert len(expectations) == 1
        assert expectations[0][0].url == 'https://api.example.com/users'

    def test_list_format(self, temp_dir, sample_capture):
        path = temp_dir / 'captures.json'
        path.write_text(json.dumps([sample_capture, sample_capture]))

        assert len(load_expectations(path)) == 2

    def test_invalid_captures_skipped(self, temp_dir, sample_capture):
        path = temp_dir / 'captures.json'
        path.write_text(json.dumps([sample_capture, {'method': 'GET'}, 'junk']))

        assert len(load_expectations(path)) == 1

    def test_missing_file(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_expectations(temp_dir / 'missing.json')

    def test_unknown_format(self, temp_dir):
        path = temp_dir / 'captures.json'
        path.write_text(json.dumps({'entries': []}))

        with pytest.raises(ValueError, match='Unexpected format'):
            load_expectations(path)
