"""Staged build recovery runner.

Completes a build that was staged but not committed (crash or IO failure
between the history appends and the stock rewrite). Safe to run from cron:
with nothing staged it does nothing.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

from shopdb import config
from shopdb.apps.builds import services as build_services


def run(data_dir: Optional[str] = None) -> dict:
    directory = data_dir or config.data_dir()
    record = build_services.recover_pending_build(directory)
    return {
        "data_dir": str(directory),
        "replayed": record is not None,
        "build_id": record.id if record is not None else None,
    }


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    result = run(sys.argv[1] if len(sys.argv) > 1 else None)
    print("Build recovery runner completed:", result)
