"""Entry point: ``python -m macrostack.run``

One-shot run meant to be triggered by an external scheduler (cron,
CI workflow).  Takes no arguments; everything is configured through
environment variables (see :mod:`macrostack.config`), optionally from a
``.env`` file at the repository root.

Exits 0 once the snapshot is written, even if some sections degraded.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv

from .config import Config
from .log_redaction import apply_global_log_redaction
from .pipeline import run_once


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )
    apply_global_log_redaction()

    # Existing environment wins over .env values.
    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.is_file():
        load_dotenv(env_path, override=False)

    cfg = Config()
    log = logging.getLogger(__name__)
    log.info("Collecting macro data at %s", datetime.now(timezone.utc).isoformat())
    if cfg.using_demo_keys:
        log.warning("Using public demo credentials for: %s", ", ".join(cfg.using_demo_keys))
    run_once(cfg)


if __name__ == "__main__":
    main()
