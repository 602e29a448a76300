"""
Tests for the session navigator and browser session cleanup.
"""

import pytest
from playwright.sync_api import Error as PlaywrightError

from conftest import FakePage, HEADER_HTML, HEADER_URL
from guide_harvester.errors import NavigationTimeout
from guide_harvester.navigator import BrowserSession, SessionNavigator
from guide_harvester.run_config import HarvestConfig


class _RecordingPage(FakePage):
    def wait_for_selector(self, selector, timeout=None, state=None):
        self.waited = (selector, timeout, state)
        super().wait_for_selector(selector, timeout=timeout, state=state)


class _Handle:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = 0

    def close(self):
        self.calls += 1
        if self.fail:
            raise PlaywrightError("Target closed")

    def stop(self):
        self.close()


class TestSessionNavigator:

    def test_any_marker_satisfies_wait(self):
        page = _RecordingPage({HEADER_URL: HEADER_HTML})
        nav = SessionNavigator(page, HarvestConfig(marker_timeout_ms=1000))
        nav.navigate_and_wait_for(HEADER_URL, ["div.missing", "div.guias-cabecalho"])
        assert page.waited == ("div.missing, div.guias-cabecalho", 1000, "attached")
        assert nav.current_url == HEADER_URL

    def test_explicit_timeout_overrides_config(self):
        page = _RecordingPage({HEADER_URL: HEADER_HTML})
        nav = SessionNavigator(page, HarvestConfig())
        nav.navigate_and_wait_for(HEADER_URL, ["div.guias-cabecalho"], timeout=250)
        assert page.waited[1] == 250

    def test_marker_timeout(self):
        nav = SessionNavigator(FakePage({HEADER_URL: "<html></html>"}), HarvestConfig())
        with pytest.raises(NavigationTimeout) as excinfo:
            nav.navigate_and_wait_for(HEADER_URL, ["div.guias-cabecalho"])
        assert "div.guias-cabecalho" in str(excinfo.value)

    def test_extract_header_uses_current_page(self):
        nav = SessionNavigator(FakePage({HEADER_URL: HEADER_HTML}), HarvestConfig())
        nav.navigate_and_wait_for(HEADER_URL, ["div.guias-cabecalho"])
        header = nav.extract_header()
        assert header.cargo == "Analista Judiciario"
        assert header.icon_url == "https://guides.example.com/img/trf1.png"


class TestBrowserSessionClose:

    def test_closes_everything_even_when_handles_fail(self):
        session = BrowserSession(HarvestConfig())
        handles = [_Handle(fail=True), _Handle(), _Handle(fail=True), _Handle()]
        session._page, session._context, session._browser, session._playwright = handles

        session.close()
        session.close()

        assert [h.calls for h in handles] == [1, 1, 1, 1]
        assert session._page is session._context is session._browser is session._playwright is None
