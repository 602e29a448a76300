"""
Tests for logo download and data-URI encoding.
"""

import requests

from guide_harvester.icons import fetch_icon_data_uri


class _Response:
    def __init__(self, status_code=200, content=b"\x89PNG", headers=None):
        self.status_code = status_code
        self.ok = 200 <= status_code < 300
        self.content = content
        self.headers = headers if headers is not None else {"content-type": "image/svg+xml"}


class _Session:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append(url)
        if self.error:
            raise self.error
        return self.response


class TestFetchIconDataUri:

    def test_encodes_with_content_type(self):
        session = _Session(_Response(content=b"abc"))
        assert fetch_icon_data_uri("https://x.example.com/l.svg", session) == "data:image/svg+xml;base64,YWJj"

    def test_defaults_content_type(self):
        session = _Session(_Response(content=b"abc", headers={}))
        assert fetch_icon_data_uri("https://x.example.com/l", session).startswith("data:image/png;base64,")

    def test_http_error_is_omitted(self):
        assert fetch_icon_data_uri("https://x.example.com/l", _Session(_Response(404))) is None

    def test_transport_error_is_omitted(self):
        session = _Session(error=requests.ConnectionError("refused"))
        assert fetch_icon_data_uri("https://x.example.com/l", session) is None

    def test_empty_url_skips_request(self):
        session = _Session(_Response())
        assert fetch_icon_data_uri("", session) is None
        assert session.calls == []
