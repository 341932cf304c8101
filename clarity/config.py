import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .lifecycle import DecisionJournal
from .storage import STORAGE_KEY, JsonlDecisionStore, LocalDecisionStore

DATA_DIR = "data"
REPORTS_DIR = "reports"
LOCAL_STORE_FILE = "local_storage.json"
DEFAULT_USER = "local-user"
FREE_DECISION_LIMIT = 10

BACKENDS = ("local", "jsonl")


@dataclass(frozen=True)
class Settings:
    data_dir: str = DATA_DIR
    reports_dir: str = REPORTS_DIR
    backend: str = "local"
    user_id: str = DEFAULT_USER
    free_limit: int = FREE_DECISION_LIMIT
    log_level: str = "INFO"

    @property
    def local_store_path(self) -> str:
        return os.path.join(self.data_dir, LOCAL_STORE_FILE)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if environ is None else environ

    backend = env.get("DECISION_FITNESS_BACKEND", "local").strip().lower()
    if backend not in BACKENDS:
        raise ValueError(f"DECISION_FITNESS_BACKEND must be one of {BACKENDS}, got {backend!r}")

    raw_limit = env.get("DECISION_FITNESS_FREE_LIMIT", str(FREE_DECISION_LIMIT))
    try:
        free_limit = int(raw_limit)
    except ValueError:
        raise ValueError(f"DECISION_FITNESS_FREE_LIMIT must be an integer, got {raw_limit!r}")

    return Settings(
        data_dir=env.get("DECISION_FITNESS_DATA_DIR", DATA_DIR),
        reports_dir=env.get("DECISION_FITNESS_REPORTS_DIR", REPORTS_DIR),
        backend=backend,
        user_id=env.get("DECISION_FITNESS_USER", DEFAULT_USER),
        free_limit=free_limit,
        log_level=env.get("DECISION_FITNESS_LOG_LEVEL", "INFO").upper(),
    )


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_journal(settings: Settings) -> DecisionJournal:
    if settings.backend == "jsonl":
        store = JsonlDecisionStore(settings.data_dir)
    else:
        store = LocalDecisionStore(settings.local_store_path, key=STORAGE_KEY)
    journal = DecisionJournal(store, user_id=settings.user_id)
    journal.load()
    return journal
