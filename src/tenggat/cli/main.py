# src/tenggat/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the deadline scheduler (countdown refresh + alert check) in a background thread,
- the console REPL in the main thread.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_scheduler import start_scheduler_in_background

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    for name in ("task_store", "notified"):
        try:
            store = getattr(state, name, None)
            if store is not None and hasattr(store, "close"):
                store.close()
        except Exception:
            logger.debug("%s close failed.", name, exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/tenggat")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logging.getLogger("nio").setLevel(max(console_level, logging.INFO))
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    logger.info("Starting %s...", getattr(settings, "app_name", "tenggat"))

    state = create_initial_state(settings=settings)

    runner = start_scheduler_in_background(state)
    try:
        run_console_loop(state)
    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=10.0)

        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
