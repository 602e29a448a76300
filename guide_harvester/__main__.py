#!/usr/bin/env python3
"""
Command-line Guide Import
=========================
Imports one guide URL for one owner and prints a summary.

All configuration flows through ``HarvestConfig``: defaults, then ``.env`` /
environment variables, then flags.

Run with: python -m guide_harvester <url> --user <id>
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env (DATA_DIR, GUIDE_* settings) before building the config
_env_path = Path(__file__).resolve().parent.parent / '.env'
if _env_path.exists():
    load_dotenv(_env_path)
else:
    load_dotenv()

from .errors import HarvestError
from .importer import GuideImporter
from .run_config import HarvestConfig

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)


def get_user_input(prompt: str, default: str = None) -> str:
    """Get user input with optional default value."""
    if default:
        full_prompt = f"{prompt} [{default}]: "
    else:
        full_prompt = f"{prompt}: "
    response = input(full_prompt).strip()
    return response if response else default


def print_summary(result) -> None:
    """Print import summary."""
    plan = result.plan
    print("\n" + "=" * 65)
    print("IMPORT COMPLETE")
    print("=" * 65)
    print(f"  Plan:          {plan.name}")
    if plan.cargo:
        print(f"  Role:          {plan.cargo}")
    if plan.banca:
        print(f"  Board:         {plan.banca}")
    print(f"  Subjects:      {len(plan.subjects)}")
    for subject in plan.subjects:
        print(f"    - {subject.subject[:50]:<50} {subject.total_topics_count:>5} topics")
    print(f"  Total topics:  {plan.total_topics}")
    print(f"  Icon embedded: {'yes' if plan.icon_url else 'no'}")
    print(f"  Saved to:      {result.path}")
    print(f"  Total time:    {result.stats.get('elapsed_time', 0):.1f}s")
    print("=" * 65)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Guide Harvester - import a study guide into a study-plan JSON',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m guide_harvester                                        # Interactive mode
  python -m guide_harvester https://example.com/guias/123 --user alice
  python -m guide_harvester https://example.com/guias/123 --user alice --output-docx plan.docx
        """
    )
    parser.add_argument('url', nargs='?', help='Guide URL (omit for interactive mode)')
    parser.add_argument('--user', type=str, default=os.environ.get('GUIDE_USER'),
                        help='Owner identity the plan is stored under (or set GUIDE_USER)')
    parser.add_argument('--data-dir', type=str, help='Root data directory (default: $DATA_DIR or ./data)')
    parser.add_argument('--timeout', type=float, help='Page load timeout in seconds (default: 60)')
    parser.add_argument('--marker-timeout', type=float,
                        help='Structural marker timeout in seconds (default: 30)')
    parser.add_argument('--headed', action='store_true', help='Show the browser window')
    parser.add_argument('--output-docx', type=str, help='Also export the plan to this DOCX path')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def run_cli_with_args(argv=None) -> int:
    """Parse argv, build HarvestConfig, run the import. Returns the exit code."""
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    url = args.url or get_user_input("\nEnter guide URL")
    if not url:
        print("Error: URL is required")
        return 1
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url

    user = args.user or get_user_input("Owner identity")
    if not user:
        print("Error: an owner identity is required (--user or GUIDE_USER)")
        return 1

    cfg = HarvestConfig.from_cli_args(args)
    cfg.log_summary(url)

    importer = GuideImporter(cfg)
    importer.set_progress_callback(
        lambda done, total, name: print(f"[Subject {done}/{total}] {name[:70]}")
    )

    try:
        result = importer.import_guide(url, user)
    except HarvestError as exc:
        logger.error(f"Import failed: {exc}")
        return 2

    if args.output_docx:
        from .word_exporter import export_plan_docx
        path = export_plan_docx(result.plan, args.output_docx)
        print(f"  Exported: {path}")

    print_summary(result)
    return 0


if __name__ == '__main__':
    sys.exit(run_cli_with_args())
