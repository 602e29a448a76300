"""
Harvest Run Configuration
=========================
Single source of truth for importer defaults.

The CLI, the Streamlit app and the importer all read from ``HarvestConfig``.
Values come from the canonical defaults below, then the environment
(``from_env``), then CLI flags (``from_cli_args``).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import List

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Canonical defaults: the ONLY place these numbers live
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "data_dir": "data",
    "page_load_timeout_ms": 60000,   # full page load (goto)
    "marker_timeout_ms": 30000,      # structural marker appearance
    "icon_timeout_s": 15,
    "headless": True,
    "viewport_width": 1280,
    "viewport_height": 800,
    "browser_args": ["--no-sandbox"],
    "user_agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    ),
}

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class HarvestConfig:
    """
    Configuration consumed by the navigator, the importer and storage.

    Populate via:
      - ``HarvestConfig()``                 → all defaults
      - ``HarvestConfig.from_env()``        → defaults + environment
      - ``HarvestConfig.from_cli_args(ns)`` → environment + argparse flags
    """

    # ---- Storage ----
    data_dir: str = _DEFAULTS["data_dir"]

    # ---- Timeouts ----
    page_load_timeout_ms: int = _DEFAULTS["page_load_timeout_ms"]
    marker_timeout_ms: int = _DEFAULTS["marker_timeout_ms"]
    icon_timeout_s: float = _DEFAULTS["icon_timeout_s"]

    # ---- Browser ----
    headless: bool = _DEFAULTS["headless"]
    viewport_width: int = _DEFAULTS["viewport_width"]
    viewport_height: int = _DEFAULTS["viewport_height"]
    browser_args: List[str] = field(default_factory=lambda: list(_DEFAULTS["browser_args"]))
    user_agent: str = _DEFAULTS["user_agent"]

    # -----------------------------------------------------------------------
    # Factory helpers
    # -----------------------------------------------------------------------
    @classmethod
    def from_env(cls) -> "HarvestConfig":
        """Build config from ``DATA_DIR`` and ``GUIDE_*`` environment variables."""
        cfg = cls()
        cfg.data_dir = os.environ.get("DATA_DIR") or cfg.data_dir

        headless = os.environ.get("GUIDE_HEADLESS")
        if headless is not None:
            cfg.headless = headless.strip().lower() in _TRUTHY

        for env_name, attr in (
            ("GUIDE_PAGE_TIMEOUT_MS", "page_load_timeout_ms"),
            ("GUIDE_MARKER_TIMEOUT_MS", "marker_timeout_ms"),
        ):
            raw = os.environ.get(env_name)
            if not raw:
                continue
            try:
                setattr(cfg, attr, int(raw))
            except ValueError:
                logger.warning(f"Ignoring non-integer {env_name}={raw!r}")
        return cfg

    @classmethod
    def from_cli_args(cls, args) -> "HarvestConfig":
        """Build config from an argparse Namespace (``__main__.py``)."""
        cfg = cls.from_env()
        overrides = {}
        if getattr(args, "data_dir", None):
            overrides["data_dir"] = args.data_dir
        if getattr(args, "timeout", None):
            overrides["page_load_timeout_ms"] = int(args.timeout * 1000)
        if getattr(args, "marker_timeout", None):
            overrides["marker_timeout_ms"] = int(args.marker_timeout * 1000)
        if getattr(args, "headed", False):
            overrides["headless"] = False
        return replace(cfg, **overrides)

    # -----------------------------------------------------------------------
    # Logging helper
    # -----------------------------------------------------------------------
    def log_summary(self, url: str) -> None:
        """Emit a structured summary to the logger."""
        logger.info("=" * 60)
        logger.info("GUIDE IMPORT CONFIG")
        logger.info("=" * 60)
        logger.info(f"  URL:              {url}")
        logger.info(f"  Data Dir:         {self.data_dir}")
        logger.info(f"  Page Timeout:     {self.page_load_timeout_ms}ms")
        logger.info(f"  Marker Timeout:   {self.marker_timeout_ms}ms")
        logger.info(f"  Headless:         {self.headless}")
        logger.info("=" * 60)
