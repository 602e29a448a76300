"""
Shared fixtures: a fake Playwright page so imports run without Chromium.
"""

from contextlib import contextmanager
from typing import Dict, List, Optional

import pytest
from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeout

from guide_harvester.navigator import SessionNavigator
from guide_harvester.run_config import HarvestConfig


class FakePage:
    """Serves canned HTML by URL and mimics goto / wait_for_selector / content."""

    def __init__(self, pages: Dict[str, str], failures: Optional[Dict[str, Exception]] = None):
        self.pages = pages
        self.failures = failures or {}
        self.url = ""
        self.visited: List[str] = []
        self.goto_kwargs: List[dict] = []

    def goto(self, url, **kwargs):
        self.visited.append(url)
        self.goto_kwargs.append(kwargs)
        if url in self.failures:
            raise self.failures[url]
        if url not in self.pages:
            raise PlaywrightError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self.url = url

    def wait_for_selector(self, selector, timeout=None, state=None):
        soup = BeautifulSoup(self.pages[self.url], 'lxml')
        if soup.select_one(selector) is None:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for {selector}")

    def content(self):
        return self.pages[self.url]


class FakeBrowser:
    """Session factory recording how many sessions were opened and closed."""

    def __init__(self, pages: Dict[str, str], failures: Optional[Dict[str, Exception]] = None):
        self.page = FakePage(pages, failures)
        self.opened = 0
        self.closed = 0

    @contextmanager
    def __call__(self, config: HarvestConfig):
        self.opened += 1
        try:
            yield SessionNavigator(self.page, config)
        finally:
            self.closed += 1


def topic_li(text: str, count: Optional[str] = None) -> str:
    """An outline item, optionally carrying a "N questões" annotation."""
    annotation = ""
    if count is not None:
        annotation = f'<span class="capitulo-questoes"><span>{count}</span></span>'
    return f"<li><span>{text} {annotation}</span></li>"


def subject_page(outline: str) -> str:
    return (
        "<html><body>"
        f'<div class="caderno-guia-arvore-indice"><ul>{outline}</ul></div>'
        "</body></html>"
    )


HEADER_URL = "https://guides.example.com/guias/trf-1"

HEADER_HTML = """
<html><head><title>TRF 1 - Analista - Guides</title></head><body>
<div class="guias-cabecalho">
  <div class="guias-cabecalho-logo"><img src="/img/trf1.png"></div>
  <div class="guias-cabecalho-concurso-nome"> TRF 1 Regiao </div>
  <div class="guias-cabecalho-concurso-cargo">Analista Judiciario</div>
  <div class="guias-cabecalho-concurso-edital">Edital 01/2024</div>
</div>
<div class="guia-materia-item">
  <h4 class="guia-materia-item-nome"><a href="/guias/materia/adm">Direito Administrativo</a></h4>
</div>
<div class="guia-materia-item">
  <h4 class="guia-materia-item-nome"><a href="/guias/materia/pt">Portugues</a></h4>
</div>
<div class="guia-materia-item">
  <h4 class="guia-materia-item-nome"><a href="/guias/materia/ineditas">Inéditas</a></h4>
</div>
</body></html>
"""

ADM_HTML = subject_page(
    topic_li("Cap. 1", "10 questões")
    + "<ul>"
    + topic_li("Art. 1", "10 questões")
    + "<ul>" + topic_li("Inciso I", "5 questões") + topic_li("Inciso II", "5 questões") + "</ul>"
    + "</ul>"
)

PT_HTML = subject_page(
    topic_li("Crase", "uma questão")
    + topic_li("Concordância", "3 questões")
)


@pytest.fixture
def guide_pages():
    return {
        HEADER_URL: HEADER_HTML,
        "https://guides.example.com/guias/materia/adm": ADM_HTML,
        "https://guides.example.com/guias/materia/pt": PT_HTML,
    }


@pytest.fixture
def config(tmp_path):
    return HarvestConfig(data_dir=str(tmp_path / "data"))
