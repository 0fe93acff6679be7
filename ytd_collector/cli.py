"""CLI entrypoint for the scheduled collection run."""

import argparse
import asyncio
import logging
import os
import sys
import warnings

# Suppress LiteLLM's direct prints (must be before import)
os.environ["LITELLM_LOG"] = "ERROR"

warnings.filterwarnings("ignore", message="Pydantic serializer warnings")
warnings.filterwarnings("ignore", message="Unclosed client session")
warnings.filterwarnings("ignore", category=ResourceWarning)

# Suppress noisy loggers (HTTP clients, LiteLLM internals)
for logger_name in ["httpx", "httpcore", "litellm", "LiteLLM",
                    "LiteLLM Router", "asyncio"]:
    logging.getLogger(logger_name).setLevel(logging.ERROR)

from dotenv import load_dotenv  # noqa: E402 - must be after logging config

load_dotenv()

from ytd_collector.adapters import AdapterContext, select_sources  # noqa: E402
from ytd_collector.core.config import API_KEY_ENV_VAR, StoreConfig, VisionConfig  # noqa: E402
from ytd_collector.core.cost_tracker import CostTracker  # noqa: E402
from ytd_collector.core.run_logger import get_logger  # noqa: E402
from ytd_collector.core.vision_client import VisionClient  # noqa: E402
from ytd_collector.orchestrator import Orchestrator  # noqa: E402


async def collect(
    store_path: str = StoreConfig.PATH,
    only: list[str] | None = None,
    history_path: str | None = None,
    verbose: bool = False,
    log_dir: str | None = None,
):
    """Run the selected sources and write the store.

    Args:
        store_path: JSON store to merge into.
        only: Source keys to run (default: all).
        history_path: Optional JSON-lines history log.
        verbose: DEBUG-level console output.
        log_dir: Directory for a per-run log file.

    Returns:
        The RunReport.
    """
    run_logger = get_logger(verbose=verbose, log_dir=log_dir)

    sources = select_sources(only)

    if not os.environ.get(API_KEY_ENV_VAR):
        run_logger.warning(f"{API_KEY_ENV_VAR} not set; vision fallbacks will fail")

    cost_tracker = CostTracker()
    context = AdapterContext(
        vision=VisionClient(model=VisionConfig.MODEL, cost_tracker=cost_tracker),
        logger=logging.getLogger("ytd_collector.adapters"),
    )
    orchestrator = Orchestrator(
        sources,
        context=context,
        store_path=store_path,
        history_path=history_path,
        run_logger=run_logger,
    )
    report = await orchestrator.run()

    if cost_tracker.call_count > 0:
        run_logger.info(f"\n{cost_tracker.summary(report)}")
    return report


def main():
    parser = argparse.ArgumentParser(
        description="Collect year-to-date shooting counts from city publishers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ytd-collect                                   # all sources -> data/manual-auto.json
  ytd-collect --only detroit --only durham -v   # two sources, debug output
  ytd-collect --history data/history.jsonl      # also append to the history log
        """,
    )
    parser.add_argument(
        "--store",
        default=StoreConfig.PATH,
        help=f"Store file to merge into (default: {StoreConfig.PATH})",
    )
    parser.add_argument(
        "--history",
        default=None,
        help="Append this run's records to a JSON-lines history file",
    )
    parser.add_argument(
        "--only",
        action="append",
        metavar="KEY",
        help="Run only this source key (repeatable), e.g. --only stlouis",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output with DEBUG level logging",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="Directory for per-run log files",
    )

    args = parser.parse_args()

    try:
        asyncio.run(collect(
            store_path=args.store,
            only=args.only,
            history_path=args.history,
            verbose=args.verbose,
            log_dir=args.log_dir,
        ))
    except Exception as e:
        print(f"\n[ERROR] Run failed: {type(e).__name__}: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
