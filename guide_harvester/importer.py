"""
Guide Importer
==============
Crawl orchestration for one guide import.

Flow (strictly sequential, one browser session)::

    INIT → HEADER_LOADED → SUBJECTS_LINKED
         → (SUBJECT_LOADED → SUBJECT_EXTRACTED)*   one pair per subject
         → ASSEMBLED → PERSISTED

Any navigation, marker-wait, extraction or persistence failure moves the
importer to FAILED and aborts the run; no partial plan is written.  The
browser session is released on every exit path.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, ContextManager, Dict, List, Optional, Tuple

from .aggregator import extract_weights
from .errors import AuthError, HarvestError, ValidationError
from .icons import create_session, fetch_icon_data_uri
from .models import HeaderData, PlanData, Subject
from .navigator import BrowserSession, SessionNavigator
from .run_config import HarvestConfig
from .storage import resolve_user_directory, write_plan
from .subject_links import collect_subject_links
from .topic_tree import TOPIC_TREE_SELECTOR, build_topics_from_soup

logger = logging.getLogger(__name__)

# Any of these means the header page has rendered
HEADER_MARKERS = (
    'div.guias-cabecalho',
    'div.cadernos-agrupamento',
    'div.detalhes-cabecalho',
)

SUBJECT_MARKERS = (TOPIC_TREE_SELECTOR,)

SUCCESS_MESSAGE = "Guide imported successfully!"

SessionFactory = Callable[[HarvestConfig], ContextManager[SessionNavigator]]
IconFetcher = Callable[[str], Optional[str]]


class ImportState(Enum):
    INIT = "init"
    HEADER_LOADED = "header_loaded"
    SUBJECTS_LINKED = "subjects_linked"
    SUBJECT_LOADED = "subject_loaded"
    SUBJECT_EXTRACTED = "subject_extracted"
    ASSEMBLED = "assembled"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass
class ImportResult:
    """
    Outcome of a successful import.
    """
    plan: PlanData
    path: Optional[Path] = None
    stats: Dict = field(default_factory=dict)


class GuideImporter:
    """
    Harvests a guide into a ``PlanData`` and persists it for one owner.
    """

    def __init__(
        self,
        config: HarvestConfig = None,
        session_factory: SessionFactory = None,
        icon_fetcher: IconFetcher = None,
    ):
        """
        Args:
            config: Importer configuration
            session_factory: Builds the scoped browser session; defaults to
                ``BrowserSession`` (Playwright Chromium)
            icon_fetcher: Turns a logo URL into a data URI or None; defaults
                to a ``requests`` download
        """
        self.config = config or HarvestConfig()
        self.session_factory = session_factory or BrowserSession
        self.icon_fetcher = icon_fetcher or self._default_icon_fetcher()

        self.state = ImportState.INIT
        self.history: List[ImportState] = []
        self._progress_callback: Optional[Callable] = None
        self._pages_loaded = 0

    def set_progress_callback(self, callback: Callable) -> None:
        """Set callback for progress updates: callback(done, total, subject_name)"""
        self._progress_callback = callback

    def _default_icon_fetcher(self) -> IconFetcher:
        session = create_session(self.config.user_agent)
        timeout = self.config.icon_timeout_s
        return lambda url: fetch_icon_data_uri(url, session=session, timeout=timeout)

    def _transition(self, state: ImportState) -> None:
        logger.debug(f"[IMPORT] {self.state.name} → {state.name}")
        self.state = state
        self.history.append(state)

    def _reset(self) -> None:
        self.state = ImportState.INIT
        self.history = [ImportState.INIT]
        self._pages_loaded = 0

    # ── Crawl steps ───────────────────────────────────────────────

    def _load_header(
        self, navigator: SessionNavigator, url: str
    ) -> Tuple[HeaderData, Dict[str, str]]:
        navigator.navigate_and_wait_for(url, HEADER_MARKERS)
        self._pages_loaded += 1

        header = navigator.extract_header()
        self._transition(ImportState.HEADER_LOADED)
        logger.info(f"[IMPORT] Header: name='{header.name}' cargo='{header.cargo}'")

        links = collect_subject_links(navigator.snapshot(), base_url=navigator.current_url or url)
        self._transition(ImportState.SUBJECTS_LINKED)
        logger.info(f"[IMPORT] {len(links)} subjects linked")
        return header, links

    def _crawl_subjects(
        self, navigator: SessionNavigator, links: Dict[str, str]
    ) -> List[Subject]:
        subjects: List[Subject] = []
        total = len(links)

        for index, (subject_name, subject_url) in enumerate(links.items()):
            navigator.navigate_and_wait_for(subject_url, SUBJECT_MARKERS)
            self._pages_loaded += 1
            self._transition(ImportState.SUBJECT_LOADED)

            topics = build_topics_from_soup(navigator.snapshot())
            subject = Subject.create(subject_name, topics, index)
            subjects.append(subject)
            self._transition(ImportState.SUBJECT_EXTRACTED)

            logger.info(
                f"[IMPORT] [{index + 1}/{total}] {subject_name}: "
                f"{subject.total_topics_count} topics"
            )
            if self._progress_callback:
                self._progress_callback(index + 1, total, subject_name)

        return subjects

    def _assemble(self, header: HeaderData, subjects: List[Subject]) -> PlanData:
        icon = self.icon_fetcher(header.icon_url) if header.icon_url else None
        plan = PlanData(
            name=header.name,
            cargo=header.cargo,
            edital=header.edital,
            banca=header.banca,
            icon_url=icon,
            subjects=subjects,
            banca_topic_weights=extract_weights(subjects),
        )
        self._transition(ImportState.ASSEMBLED)
        return plan

    # ── Public API ────────────────────────────────────────────────

    def harvest(self, url: str) -> PlanData:
        """
        Crawl the header page and every subject page and assemble the plan.

        Raises:
            ValidationError: if ``url`` is empty
            NavigationError: a page or its marker did not load in time
            ExtractionError: a subject page lacks its topic tree
        """
        if not url or not url.strip():
            raise ValidationError("The guide URL is required.")
        url = url.strip()

        self._reset()
        try:
            with self.session_factory(self.config) as navigator:
                header, links = self._load_header(navigator, url)
                subjects = self._crawl_subjects(navigator, links)
            return self._assemble(header, subjects)
        except HarvestError as exc:
            self._transition(ImportState.FAILED)
            logger.error(f"[IMPORT] Aborted in {self.history[-2].name}: {exc}")
            raise

    def import_guide(self, url: str, identity: Optional[str]) -> ImportResult:
        """
        Harvest ``url`` and write the plan into ``identity``'s directory.

        Raises:
            AuthError: if ``identity`` is empty
            HarvestError: any crawl or persistence failure
        """
        if not identity:
            raise AuthError("User is not authenticated.")

        start = time.time()
        plan = self.harvest(url)

        try:
            user_dir = resolve_user_directory(identity, self.config.data_dir)
            path = write_plan(plan, user_dir)
        except HarvestError as exc:
            self._transition(ImportState.FAILED)
            logger.error(f"[IMPORT] Persist failed: {exc}")
            raise
        self._transition(ImportState.PERSISTED)

        elapsed = time.time() - start
        stats = {
            'subjects': len(plan.subjects),
            'topics': plan.total_topics,
            'pages_loaded': self._pages_loaded,
            'elapsed_time': round(elapsed, 2),
        }

        logger.info("=" * 60)
        logger.info("GUIDE IMPORT COMPLETE")
        logger.info(f"Plan: {plan.name}")
        logger.info(f"Subjects: {stats['subjects']}  Topics: {stats['topics']}")
        logger.info(f"Saved to: {path}")
        logger.info(f"Elapsed time: {stats['elapsed_time']}s")
        logger.info("=" * 60)

        return ImportResult(plan=plan, path=path, stats=stats)

    def handle_request(self, payload: Optional[dict], identity: Optional[str]) -> dict:
        """
        Request-level entry point: ``{"guideUrl": ...}`` in, response dict out.

        Success: ``{"status": 200, "message": ..., "plan": {...}}``.
        Failure: ``{"status": 4xx/500, "error": ...}``; no plan is included.
        """
        if not identity:
            return {'status': 401, 'error': "Not authorized. Sign in to import a guide."}

        payload = payload or {}
        url = payload.get('guideUrl') or payload.get('url')
        if not url:
            return {'status': 400, 'error': "The guide URL is required."}

        try:
            result = self.import_guide(url, identity)
        except ValidationError as exc:
            return {'status': 400, 'error': str(exc)}
        except HarvestError as exc:
            return {'status': 500, 'error': f"Failed to import guide: {exc}"}
        except Exception as exc:
            logger.error(f"[IMPORT] Unexpected failure: {exc}", exc_info=True)
            return {'status': 500, 'error': f"Failed to import guide: {exc}"}

        return {
            'status': 200,
            'message': SUCCESS_MESSAGE,
            'plan': result.plan.to_dict(),
        }


def import_guide(url: str, identity: str, config: HarvestConfig = None) -> ImportResult:
    """
    Convenience function for a one-off import.

    Args:
        url: Header page of the guide
        identity: Owner the plan is stored for
        config: Optional configuration (environment defaults otherwise)
    """
    importer = GuideImporter(config or HarvestConfig.from_env())
    return importer.import_guide(url, identity)
