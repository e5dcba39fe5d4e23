from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from quest_reminder.config import load_settings
from quest_reminder.db import Database
from quest_reminder.jobs_runner import run_job
from quest_reminder.logging_setup import setup_logging


def main() -> None:
    if len(sys.argv) != 2:
        raise SystemExit("Usage: python jobs.py <reminders>")

    setup_logging()
    job_name = sys.argv[1]
    settings = load_settings(require_token=job_name == "reminders")
    db = Database(settings.database_path)
    run_job(job_name, db, settings)


if __name__ == "__main__":
    main()
