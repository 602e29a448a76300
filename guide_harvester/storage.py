"""
Plan Storage
============
Per-owner plan directories and the single JSON snapshot written per import.

Layout::

    <data_dir>/<identity>/<slug(plan name)>.json

Every write replaces the previous file of the same name atomically
(temporary file in the same directory, then ``os.replace``).
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from .errors import AuthError, PersistenceError
from .models import PlanData

logger = logging.getLogger(__name__)

FALLBACK_SLUG = "guide"

_WHITESPACE = re.compile(r"\s+")
_NON_SLUG = re.compile(r"[^\w\-]+")
_HYPHEN_RUNS = re.compile(r"-{2,}")


def slugify(text: Optional[str]) -> str:
    """
    Filesystem-safe name: lowercase, whitespace runs to ``-``, anything
    outside letters/digits/underscore/hyphen dropped, hyphen runs collapsed.

    >>> slugify("Direito   Administrativo!!")
    'direito-administrativo'
    """
    if not text:
        return ""
    slug = str(text).lower().strip()
    slug = _WHITESPACE.sub("-", slug)
    slug = _NON_SLUG.sub("", slug)
    return _HYPHEN_RUNS.sub("-", slug)


def resolve_user_directory(identity: Optional[str], data_dir: str) -> Path:
    """
    Return (creating it if needed) the storage directory for ``identity``.

    Raises:
        AuthError: if no identity is supplied
        PersistenceError: if the directory cannot be created
    """
    if not identity or not str(identity).strip():
        raise AuthError("User is not authenticated.")

    user_dir = Path(data_dir) / str(identity).strip()
    try:
        user_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistenceError(f"Could not create data directory {user_dir}: {exc}") from exc
    return user_dir


def plan_filename(plan: PlanData) -> str:
    return f"{slugify(plan.name) or FALLBACK_SLUG}.json"


def write_plan(plan: PlanData, directory: Path) -> Path:
    """
    Write ``plan`` as ``<slug>.json`` inside ``directory``, replacing any
    existing file.

    Returns:
        Absolute path of the written file

    Raises:
        PersistenceError: on any serialization or filesystem failure
    """
    output_path = Path(directory) / plan_filename(plan)

    try:
        payload = json.dumps(plan.to_dict(), indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise PersistenceError(f"Could not serialize plan '{plan.name}': {exc}") from exc

    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            dir=str(output_path.parent), prefix=".", suffix=".json.tmp"
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        os.replace(tmp_name, output_path)
    except OSError as exc:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise PersistenceError(f"Could not write {output_path}: {exc}") from exc

    logger.info(f"[STORE] Wrote plan to {output_path.absolute()}")
    return output_path.absolute()
