"""
Guide Harvester Package
Imports a published study guide (header page + one page per subject) into a
normalized, hierarchical study-plan JSON document.

CLI Usage:
    python -m guide_harvester <url> --user <id> [options]

    Options:
        --data-dir        Root directory for per-user plans (default: $DATA_DIR or ./data)
        --timeout         Page load timeout in seconds (default: 60)
        --marker-timeout  Structural marker timeout in seconds (default: 30)
        --headed          Show the browser window
        --output-docx     Also export the plan to DOCX
"""

from .models import Topic, Subject, PlanData, HeaderData, SUBJECT_COLORS
from .counts import parse_question_count
from .topic_tree import build_topics, build_topics_from_html
from .aggregator import compute_total, extract_weights, iter_topics
from .subject_links import collect_subject_links
from .header import extract_header
from .navigator import BrowserSession, SessionNavigator
from .importer import GuideImporter, ImportResult, ImportState, import_guide
from .run_config import HarvestConfig
from .storage import slugify, write_plan, resolve_user_directory
from .errors import (
    HarvestError,
    AuthError,
    ValidationError,
    NavigationError,
    NavigationTimeout,
    NetworkError,
    ExtractionError,
    PersistenceError,
)

__all__ = [
    # Data model
    'Topic',
    'Subject',
    'PlanData',
    'HeaderData',
    'SUBJECT_COLORS',
    # Extraction
    'parse_question_count',
    'build_topics',
    'build_topics_from_html',
    'compute_total',
    'extract_weights',
    'iter_topics',
    'collect_subject_links',
    'extract_header',
    # Crawl
    'BrowserSession',
    'SessionNavigator',
    'GuideImporter',
    'ImportResult',
    'ImportState',
    'import_guide',
    'HarvestConfig',
    # Storage
    'slugify',
    'write_plan',
    'resolve_user_directory',
    # Errors
    'HarvestError',
    'AuthError',
    'ValidationError',
    'NavigationError',
    'NavigationTimeout',
    'NetworkError',
    'ExtractionError',
    'PersistenceError',
]

__version__ = '1.0.0'
