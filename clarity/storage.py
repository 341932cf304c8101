import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, TextIO

from .types import ActionPlan, ActionPlanItem, DecisionInput, FollowUp, SavedDecision, is_number

logger = logging.getLogger(__name__)

STORAGE_KEY = "decision_fitness_v1_decisions"


class StorageError(Exception):
    """A write to the decision store did not go through."""


def now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0, tzinfo=None).isoformat() + "Z"


def new_id(prefix: str = "dec") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def append_jsonl(path: str, record: Dict) -> None:
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, ensure_ascii=False) + "\n")
    except OSError as e:
        raise StorageError(f"could not append to {path}: {e}") from e


def read_jsonl(path: str, limit: int = 5000) -> List[Dict]:
    if not os.path.exists(path):
        return []
    rows: List[Dict] = []
    with open(path, "r", encoding="utf-8") as f:
        for n, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                row = json.loads(line)
            except json.JSONDecodeError:
                logger.warning("skipping unparseable line %d in %s", n, path)
                continue
            if isinstance(row, dict):
                rows.append(row)
    return rows[-limit:]


def replace_file(path: str, write: Callable[[TextIO], None]) -> None:
    # write next to the target, then swap it in; a failed write leaves the old file intact
    tmp = path + ".tmp"
    try:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            write(f)
        os.replace(tmp, path)
    except OSError as e:
        raise StorageError(f"could not write {path}: {e}") from e


def overwrite_jsonl(path: str, rows: List[Dict]) -> None:
    def write(f):
        for r in rows:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")

    replace_file(path, write)


# ----------------------------
# Row-level store
# ----------------------------
class DecisionStore(ABC):
    """
    Row-level persistence for decisions, follow-ups and action plans.

    Rows use the column names of the relational schema (decision_text,
    reason_text, cost_level, ...). Joining rows into SavedDecision objects is
    done by the caller with map_row_to_saved_decision(). Writes raise
    StorageError.
    """

    @abstractmethod
    def list_decisions(self, user_id: str) -> List[Dict[str, Any]]:
        """Decision rows for one user, newest first."""

    @abstractmethod
    def list_follow_ups(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def list_action_plans(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def create_decision(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    def create_or_replace_follow_up(self, decision_id: str, fields: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def upsert_action_plan(self, decision_id: str, items: List[Dict[str, Any]]) -> None:
        ...

    def count_decisions(self, user_id: str) -> int:
        return len(self.list_decisions(user_id))


class JsonlDecisionStore(DecisionStore):
    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self.decisions_path = os.path.join(data_dir, "decisions.jsonl")
        self.follow_ups_path = os.path.join(data_dir, "follow_ups.jsonl")
        self.action_plans_path = os.path.join(data_dir, "action_plans.jsonl")

    def list_decisions(self, user_id: str) -> List[Dict[str, Any]]:
        rows = [r for r in read_jsonl(self.decisions_path, limit=50_000) if r.get("user_id") == user_id]
        # file order is insertion order; reverse first so equal timestamps stay newest-first
        rows.reverse()
        return sorted(rows, key=lambda r: str(r.get("created_at", "")), reverse=True)

    def list_follow_ups(self) -> List[Dict[str, Any]]:
        return read_jsonl(self.follow_ups_path, limit=50_000)

    def list_action_plans(self) -> List[Dict[str, Any]]:
        return read_jsonl(self.action_plans_path, limit=50_000)

    def create_decision(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        ts = now_iso()
        row = dict(fields)
        row["id"] = new_id("dec")
        row["created_at"] = ts
        row["updated_at"] = ts
        append_jsonl(self.decisions_path, row)
        logger.info("created decision %s for user %s", row["id"], row.get("user_id"))
        return row

    def create_or_replace_follow_up(self, decision_id: str, fields: Dict[str, Any]) -> None:
        ts = now_iso()
        rows = [r for r in self.list_follow_ups() if r.get("decision_id") != decision_id]
        row = dict(fields)
        row.update({"id": new_id("fu"), "decision_id": decision_id, "created_at": ts, "updated_at": ts})
        rows.append(row)
        overwrite_jsonl(self.follow_ups_path, rows)

    def upsert_action_plan(self, decision_id: str, items: List[Dict[str, Any]]) -> None:
        ts = now_iso()
        rows = self.list_action_plans()
        for r in rows:
            if r.get("decision_id") == decision_id:
                r["items"] = items
                r["updated_at"] = ts
                break
        else:
            rows.append({
                "id": new_id("plan"),
                "decision_id": decision_id,
                "items": items,
                "created_at": ts,
                "updated_at": ts,
            })
        overwrite_jsonl(self.action_plans_path, rows)


# ----------------------------
# Row -> SavedDecision
# ----------------------------
def cost_to_number(cost: Optional[str]) -> int:
    if cost == "bajo":
        return 3
    if cost == "alto":
        return 9
    return 6


def emotional_to_energy(state: Optional[str]) -> int:
    if state == "calmado":
        return 0
    if state == "ansioso":
        return -4
    return -3


# older rows carry no conviction column; the guided questionnaire always uses this value
ROW_CONVICTION = 6


def input_to_row_fields(input: DecisionInput) -> Dict[str, Any]:
    """
    Row columns for the input a decision was scored with. The level columns
    mirror cost_to_number / emotional_to_energy; the numeric columns keep the
    exact values so the row maps back to the same input.
    """
    return {
        "reversibility": input.reversibility,
        "cost_level": {3: "bajo", 9: "alto"}.get(input.cost_if_wrong, "medio"),
        "emotional_state": {0: "calmado", -4: "ansioso"}.get(input.energy, "bajo presion"),
        "conviction": input.conviction,
        "cost_if_wrong": input.cost_if_wrong,
        "energy": input.energy,
    }


def _num(row: Dict[str, Any], key: str, default):
    value = row.get(key)
    return value if is_number(value) else default


def map_row_to_saved_decision(
    row: Dict[str, Any],
    follow_ups: List[Dict[str, Any]],
    action_plans: List[Dict[str, Any]],
) -> SavedDecision:
    decision_id = row.get("id")
    mine = [f for f in follow_ups if f.get("decision_id") == decision_id]
    latest = max(mine, key=lambda f: str(f.get("created_at", ""))) if mine else None
    plan = next((p for p in action_plans if p.get("decision_id") == decision_id), None)

    follow_up = None
    if latest is not None:
        follow_up = FollowUp(
            action_taken=latest.get("action_taken", ""),
            regret=latest.get("regret") is True,
            outcome=latest.get("outcome", ""),
            updated_at=latest.get("created_at", ""),
        )

    action_plan = None
    if plan is not None:
        items = plan.get("items")
        if not isinstance(items, list):
            items = []
        action_plan = ActionPlan(
            items=[ActionPlanItem.from_dict(i) for i in items if isinstance(i, dict)],
            created_at=plan.get("created_at", ""),
            updated_at=plan.get("updated_at", ""),
        )

    return SavedDecision(
        id=str(decision_id),
        created_at=row.get("created_at", ""),
        decision_text=row.get("decision_text", ""),
        input={
            "reversibility": row.get("reversibility") or "semi",
            "conviction": _num(row, "conviction", ROW_CONVICTION),
            "costIfWrong": _num(row, "cost_if_wrong", cost_to_number(row.get("cost_level"))),
            "energy": _num(row, "energy", emotional_to_energy(row.get("emotional_state"))),
        },
        score=_num(row, "score", 0),
        recommendation=row.get("recommendation", ""),
        reason=row.get("reason_text", ""),
        decision_type=row.get("decision_type") or None,
        follow_up=follow_up,
        action_plan=action_plan,
    )


# ----------------------------
# Key/value fallback
# ----------------------------
def safe_parse_decisions(raw: Optional[str]) -> List[SavedDecision]:
    if not raw:
        return []
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("stored decisions are not valid JSON; starting empty")
        return []
    if not isinstance(parsed, list):
        logger.warning("stored decisions are not a list; starting empty")
        return []
    out = []
    for entry in parsed:
        if isinstance(entry, dict):
            out.append(SavedDecision.from_dict(entry))
        else:
            logger.warning("skipping non-object decision entry: %r", entry)
    return out


class LocalDecisionStore:
    """
    Single-key fallback used when no row-level store is configured.

    The file is a JSON object of string keys to string values; the value under
    `key` is the JSON-encoded array of saved decisions.
    """

    def __init__(self, path: str, key: str = STORAGE_KEY):
        self.path = path
        self.key = key

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("could not read %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        replace_file(self.path, lambda f: json.dump(data, f, ensure_ascii=False))

    def load(self) -> List[SavedDecision]:
        return safe_parse_decisions(self.get_item(self.key))

    def save(self, decisions: List[SavedDecision]) -> None:
        self.set_item(self.key, json.dumps([d.to_dict() for d in decisions], ensure_ascii=False))
