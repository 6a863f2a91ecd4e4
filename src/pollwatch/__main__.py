"""Command-line entry point that logs changes under a configured directory."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .callbacks import load_callback
from .config import CallbackConfig, ConfigError, load_config
from .errors import PollWatchError
from .watcher import PollingWatcher

DEFAULT_CALLBACK = CallbackConfig(module="pollwatch.callbacks", function="log_events")


def main() -> None:
    parser = argparse.ArgumentParser(description="Poll a directory and report file changes")
    parser.add_argument(
        "--config",
        default="pollwatch.yaml",
        help="Path to the YAML configuration file (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    try:
        app_config = load_config(Path(args.config))
        callback = load_callback(app_config.callback or DEFAULT_CALLBACK)
        watcher = PollingWatcher(app_config.watch, callback)
        watcher.start()
    except ConfigError as exc:
        logging.error("%s", exc)
        raise SystemExit(2) from exc

    try:
        watcher.wait()
    except KeyboardInterrupt:
        logging.info("Watcher interrupted by user")
    except PollWatchError as exc:
        logging.error("%s", exc)
        raise SystemExit(1) from exc

    try:
        watcher.stop()
    except PollWatchError as exc:
        logging.error("%s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
