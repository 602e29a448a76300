"""
Topic Tree Builder
==================
Converts the nested ``<ul>`` outline of a subject page into Topic nodes.

The site renders each chapter as an ``<li>`` whose sub-chapters live in a
``<ul>`` placed right after it (a sibling, not a child):

    <ul>
      <li><span>Cap. 1 <span class="capitulo-questoes"><span>10 questões</span></span></span></li>
      <ul>
        <li><span>Art. 1 ...</span></li>
      </ul>
    </ul>

Wrappers whose question count equals their first child's count are
artefacts of that markup and get promoted away (see ``build_topics``).
"""

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Comment, Tag

from .counts import parse_question_count
from .errors import ExtractionError
from .models import Topic

logger = logging.getLogger(__name__)

TOPIC_TREE_SELECTOR = 'div.caderno-guia-arvore-indice ul'
COUNT_CLASS = 'capitulo-questoes'
COUNT_SELECTOR = f'span.{COUNT_CLASS} > span'

_WHITESPACE = re.compile(r'\s+')


def _inside_count_annotation(node, stop: Tag) -> bool:
    for parent in node.parents:
        if parent is stop:
            return False
        if COUNT_CLASS in (parent.get('class') or []):
            return True
    return False


def _label_text(item: Tag) -> str:
    """Text of the item's own label span, without the count annotation."""
    span = item.select_one(':scope > span')
    if span is None:
        return ""
    parts = [
        str(s) for s in span.find_all(string=True)
        if not isinstance(s, Comment) and not _inside_count_annotation(s, span)
    ]
    return _WHITESPACE.sub(' ', ''.join(parts)).strip()


def _question_count(item: Tag) -> int:
    count_el = item.select_one(COUNT_SELECTOR)
    if count_el is None:
        return 0
    return parse_question_count(count_el.get_text())


def _nested_list(item: Tag) -> Optional[Tag]:
    sibling = item.find_next_sibling()
    if sibling is not None and sibling.name == 'ul':
        return sibling
    return None


def build_topics(list_node: Tag) -> List[Topic]:
    """
    Recursively build the topics of one ``<ul>``.

    For each direct ``<li>`` child: skip it when its label is empty, read its
    count, recurse into the ``<ul>`` that immediately follows it, then either
    emit a Topic or, when ``count > 0`` and the first child topic carries the
    same count, splice the children in its place.  The comparison is made
    once against the already-built children; it is not repeated after the
    splice.
    """
    topics: List[Topic] = []

    for item in list_node.find_all('li', recursive=False):
        topic_text = _label_text(item)
        if not topic_text:
            continue

        question_count = _question_count(item)

        nested = _nested_list(item)
        child_topics = build_topics(nested) if nested is not None else []

        if (
            question_count > 0
            and child_topics
            and child_topics[0].question_count == question_count
        ):
            logger.debug(
                f"[TREE] Promoting {len(child_topics)} children of "
                f"'{topic_text[:50]}' ({question_count} questions)"
            )
            topics.extend(child_topics)
            continue

        topics.append(Topic(
            topic_text=topic_text,
            sub_topics=child_topics,
            question_count=question_count,
        ))

    return topics


def build_topics_from_html(html: str) -> List[Topic]:
    """
    Parse a subject page and build its topic outline.

    Raises:
        ExtractionError: if the page has no topic tree container
    """
    soup = BeautifulSoup(html, 'lxml')
    return build_topics_from_soup(soup)


def build_topics_from_soup(soup: BeautifulSoup) -> List[Topic]:
    root = soup.select_one(TOPIC_TREE_SELECTOR)
    if root is None:
        raise ExtractionError(
            f"Topic tree not found (expected '{TOPIC_TREE_SELECTOR}')"
        )
    return build_topics(root)
