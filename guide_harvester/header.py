"""
Header Field Extraction
=======================
Reads plan metadata (name, role, notice, board, logo) from a header page.

The site serves two header layouts, so every field has an ordered list of
extraction rules.  The first rule yielding non-empty text wins; when all of
them come up empty the field is ``""``.  Extraction never raises.
"""

import logging
import re
from typing import Callable, Dict, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .models import HeaderData

logger = logging.getLogger(__name__)

Rule = Callable[[BeautifulSoup], Optional[str]]

_WHITESPACE = re.compile(r'\s+')


def _clean(text: Optional[str]) -> str:
    if not text:
        return ""
    return _WHITESPACE.sub(' ', text).strip()


def text_of(selector: str) -> Rule:
    """Rule returning the trimmed text of the first element matching ``selector``."""
    def rule(soup: BeautifulSoup) -> str:
        el = soup.select_one(selector)
        return _clean(el.get_text()) if el is not None else ""
    rule.__name__ = f"text_of({selector!r})"
    return rule


def attr_of(selector: str, attribute: str) -> Rule:
    """Rule returning an attribute of the first element matching ``selector``."""
    def rule(soup: BeautifulSoup) -> str:
        el = soup.select_one(selector)
        return _clean(el.get(attribute)) if el is not None else ""
    rule.__name__ = f"attr_of({selector!r}, {attribute!r})"
    return rule


def title_prefix(soup: BeautifulSoup) -> str:
    """Document title up to the first ``-`` (e.g. "TRF 1 - Analista - Site")."""
    if soup.title is None:
        return ""
    return _clean(soup.title.get_text().split('-')[0])


def labelled_value(label: str) -> Rule:
    """Rule reading the element right after the ``span.detalhes-campos`` labelled ``label``.

    Parenthesised suffixes such as "(FCC)" are dropped.
    """
    def rule(soup: BeautifulSoup) -> str:
        for field_label in soup.select('span.detalhes-campos'):
            if _clean(field_label.get_text()) != label:
                continue
            value = field_label.find_next_sibling()
            if isinstance(value, Tag):
                return _clean(value.get_text().split('(')[0])
            return ""
        return ""
    rule.__name__ = f"labelled_value({label!r})"
    return rule


HEADER_RULES: Dict[str, List[Rule]] = {
    'name': [
        text_of('div.guias-cabecalho-concurso-nome'),
        text_of('div.detalhes-cabecalho-informacoes-texto h1 span:not([class])'),
        title_prefix,
    ],
    'cargo': [
        text_of('div.guias-cabecalho-concurso-cargo'),
        text_of('div.detalhes-cabecalho-informacoes-orgao'),
    ],
    'edital': [
        text_of('div.guias-cabecalho-concurso-edital'),
    ],
    'icon_url': [
        attr_of('div.guias-cabecalho-logo img', 'src'),
        attr_of('div.detalhes-cabecalho-logotipo img', 'src'),
        attr_of('img[alt*="logotipo"]', 'src'),
    ],
    'banca': [
        labelled_value('Banca'),
    ],
}


def first_non_empty(soup: BeautifulSoup, rules: List[Rule], field_name: str = "") -> str:
    """Evaluate ``rules`` in order and return the first non-empty result."""
    for rule in rules:
        try:
            value = rule(soup)
        except Exception as exc:
            logger.warning(
                f"[HEADER] Rule {getattr(rule, '__name__', rule)} failed for "
                f"'{field_name}': {exc}"
            )
            continue
        if value:
            return value
    return ""


def extract_header(soup: BeautifulSoup, base_url: str = "") -> HeaderData:
    """
    Resolve every header field through its rule list.

    Args:
        soup: Parsed header page
        base_url: Page URL, used to absolutize a relative logo ``src``
    """
    fields = {
        field_name: first_non_empty(soup, rules, field_name)
        for field_name, rules in HEADER_RULES.items()
    }

    if fields['icon_url'] and base_url and not fields['icon_url'].startswith('data:'):
        fields['icon_url'] = urljoin(base_url, fields['icon_url'])

    missing = [k for k, v in fields.items() if not v]
    if missing:
        logger.info(f"[HEADER] Fields not found on page: {', '.join(missing)}")

    return HeaderData(**fields)
