from __future__ import annotations

import argparse
import os
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from pharmacy_retriever.config.loader import ConfigError, load_settings
from pharmacy_retriever.logging.init import log_summary, set_debug, setup_logging
from pharmacy_retriever.services.orchestrator import ProcessingError, run_pipeline
from pharmacy_retriever.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env (values override the process environment) and build settings
- Apply command line overrides
- Run the pipeline and print the SUMMARY line
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (no-op when the file does not exist)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Pharmacy list retriever (EXCEL -> pharmacy.json)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--sources", type=Path, help="Source list YAML (default: xls_urls.yml)")
    p.add_argument("--rewards", type=Path, help="Reward table YAML (default: reward.yml)")
    p.add_argument("--output", type=Path, help="Output JSON path (default: pharmacy.json)")
    p.add_argument(
        "--best-effort",
        action="store_true",
        help="Skip pharmacies whose geocoding or reward lookup fails instead of aborting",
    )
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        settings = load_settings(os.environ)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    overrides = {
        "sources_path": args.sources,
        "reward_path": args.rewards,
        "output_path": args.output,
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})

    try:
        result = run_pipeline(settings, best_effort=args.best_effort)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    summary_line = render_summary_line(result)
    # log_summary adds the "SUMMARY " prefix
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
