"""
Subject Link Collector
Reads the ordered subject name -> URL mapping from a guide's header page.
"""

import logging
import re
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

# Placeholder bucket for questions not yet classified into a subject
UNCLASSIFIED_SUBJECT = 'Inéditas'

_WHITESPACE = re.compile(r'\s+')


def _text(el: Optional[Tag]) -> str:
    if el is None:
        return ""
    return _WHITESPACE.sub(' ', el.get_text()).strip()


def _href(el: Optional[Tag]) -> str:
    if el is None:
        return ""
    return (el.get('href') or '').strip()


def _guide_layout(item: Tag) -> Tuple[str, str]:
    anchor = item.select_one('h4.guia-materia-item-nome a')
    return _text(anchor), _href(anchor)


def _notebook_layout(item: Tag) -> Tuple[str, str]:
    return (
        _text(item.select_one('span.cadernos-colunas-destaque')),
        _href(item.select_one('a.cadernos-ver-detalhes')),
    )


# (layout name, item selector, per-item extractor), tried in order
LAYOUTS: List[Tuple[str, str, Callable[[Tag], Tuple[str, str]]]] = [
    ('guide', 'div.guia-materia-item', _guide_layout),
    ('notebook', 'div.cadernos-item', _notebook_layout),
]


def _first_matching_layout(
    soup: BeautifulSoup,
) -> Tuple[str, List[Tag], Callable[[Tag], Tuple[str, str]]]:
    for layout_name, selector, extract in LAYOUTS:
        items = soup.select(selector)
        if items:
            return layout_name, items, extract
    return "", [], _guide_layout


def iter_subject_entries(soup: BeautifulSoup, base_url: str = "") -> Iterator[Tuple[str, str]]:
    """Yield (name, absolute_url) in document order for the first layout that matches."""
    layout_name, items, extract = _first_matching_layout(soup)
    if not items:
        logger.warning("[LINKS] No subject items found in either known layout")
        return
    logger.info(f"[LINKS] Using '{layout_name}' layout ({len(items)} items)")

    for item in items:
        name, href = extract(item)
        if not name or not href:
            continue
        if name == UNCLASSIFIED_SUBJECT:
            continue
        yield name, urljoin(base_url, href) if base_url else href


def collect_subject_links(page: Union[BeautifulSoup, str], base_url: str = "") -> Dict[str, str]:
    """
    Collect subject links from a header page.

    A name seen twice keeps its first position but takes the later URL.

    Args:
        page: Parsed header page, or its raw HTML
        base_url: URL the page was loaded from, for resolving relative links

    Returns:
        Insertion-ordered mapping of subject name to subject page URL
    """
    soup = page if isinstance(page, BeautifulSoup) else BeautifulSoup(page, 'lxml')

    links: Dict[str, str] = {}
    for name, url in iter_subject_entries(soup, base_url):
        if name in links and links[name] != url:
            logger.warning(
                f"[LINKS] Duplicate subject '{name}', replacing {links[name]} with {url}"
            )
        links[name] = url
    return links
