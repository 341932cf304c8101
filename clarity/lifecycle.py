import logging
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Union

from .checkin import DRAFT_KEY, CheckIn
from .playbook import default_action_plan_template
from .questionnaire import Questionnaire, to_decision_input, to_row_fields
from .scoring import evaluate
from .storage import (
    DecisionStore,
    LocalDecisionStore,
    StorageError,
    input_to_row_fields,
    map_row_to_saved_decision,
    new_id,
    now_iso,
)
from .types import ActionPlan, ActionPlanItem, DecisionInput, FollowUp, SavedDecision

logger = logging.getLogger(__name__)

MAX_PLAN_ITEMS = 5


class DecisionNotFound(KeyError):
    pass


class PlanLimitError(ValueError):
    pass


# ----------------------------
# Plan edits (pure; used for draft plans and saved plans alike)
# ----------------------------
def add_item(plan: ActionPlan, text: str = "") -> ActionPlan:
    if len(plan.items) >= MAX_PLAN_ITEMS:
        raise PlanLimitError(f"an action plan holds at most {MAX_PLAN_ITEMS} steps")
    items = plan.items + [ActionPlanItem(id=new_id("item"), text=text, done=False)]
    return replace(plan, items=items, updated_at=now_iso())


def edit_item(plan: ActionPlan, item_id: str, text: str) -> ActionPlan:
    items = [replace(i, text=text) if i.id == item_id else i for i in plan.items]
    return replace(plan, items=items, updated_at=now_iso())


def toggle_item(plan: ActionPlan, item_id: str) -> ActionPlan:
    items = [replace(i, done=not i.done) if i.id == item_id else i for i in plan.items]
    return replace(plan, items=items, updated_at=now_iso())


def remove_item(plan: ActionPlan, item_id: str) -> ActionPlan:
    items = [i for i in plan.items if i.id != item_id]
    return replace(plan, items=items, updated_at=now_iso())


class DecisionJournal:
    """
    A user's saved decisions plus the operations that change them.

    `store` is either a row-level DecisionStore or the single-key
    LocalDecisionStore fallback. After any failed write the in-memory list is
    back in line with the store: rolled back for the local store, reloaded for
    the row store. The failure is then re-raised as StorageError.

    Score, recommendation and reason are computed once in save() and never
    recomputed afterwards.
    """

    def __init__(self, store: Union[DecisionStore, LocalDecisionStore], user_id: Optional[str] = None):
        self.store = store
        self.user_id = user_id
        self.decisions: List[SavedDecision] = []
        self.check_ins: Dict[str, CheckIn] = {}

    @property
    def is_local(self) -> bool:
        return isinstance(self.store, LocalDecisionStore)

    # ----------------------------
    # Reads
    # ----------------------------
    def load(self) -> List[SavedDecision]:
        if self.is_local:
            self.decisions = self.store.load()
            return self.decisions

        rows = self.store.list_decisions(self.user_id)
        ids = {r.get("id") for r in rows}
        follow_ups = [f for f in self.store.list_follow_ups() if f.get("decision_id") in ids]
        plans = [p for p in self.store.list_action_plans() if p.get("decision_id") in ids]
        self.decisions = [map_row_to_saved_decision(r, follow_ups, plans) for r in rows]
        logger.debug("loaded %d decisions for %s", len(self.decisions), self.user_id)
        return self.decisions

    def get(self, decision_id: str) -> SavedDecision:
        for d in self.decisions:
            if d.id == decision_id:
                return d
        raise DecisionNotFound(decision_id)

    def count(self) -> int:
        if self.is_local:
            return len(self.decisions)
        return self.store.count_decisions(self.user_id)

    # ----------------------------
    # Write plumbing
    # ----------------------------
    def _commit_local(self, new_list: List[SavedDecision]) -> None:
        previous = self.decisions
        self.decisions = new_list
        try:
            self.store.save(new_list)
        except StorageError:
            logger.warning("local write failed; rolling back to %d decisions", len(previous))
            self.decisions = previous
            raise

    def _replace(self, decision_id: str, **changes) -> List[SavedDecision]:
        self.get(decision_id)
        return [replace(d, **changes) if d.id == decision_id else d for d in self.decisions]

    # ----------------------------
    # Save
    # ----------------------------
    def save(
        self,
        questionnaire: Questionnaire,
        input: Optional[DecisionInput] = None,
        action_plan: Optional[ActionPlan] = None,
    ) -> SavedDecision:
        input = input or to_decision_input(questionnaire)
        result = evaluate(input)

        if self.is_local:
            entry = SavedDecision(
                id=new_id("dec"),
                created_at=now_iso(),
                decision_text=questionnaire.title(),
                input=input.to_dict(),
                score=result.score,
                recommendation=result.recommendation,
                reason=result.reason,
                decision_type=questionnaire.decision_type or None,
                action_plan=action_plan,
            )
            self._commit_local([entry] + self.decisions)
        else:
            fields = to_row_fields(questionnaire)
            # the scored input wins over the questionnaire answers
            fields.update(input_to_row_fields(input))
            fields.update({
                "user_id": self.user_id,
                "score": result.score,
                "recommendation": result.recommendation,
                "reason_text": result.reason,
            })
            row = self.store.create_decision(fields)
            if action_plan is not None and action_plan.items:
                try:
                    self.store.upsert_action_plan(row["id"], [i.to_dict() for i in action_plan.items])
                except StorageError as e:
                    # the decision exists; its plan falls back to the template on first view
                    logger.warning("decision %s saved without its draft plan: %s", row["id"], e)
            self.load()
            entry = self.get(row["id"])

        if DRAFT_KEY in self.check_ins:
            self.check_ins[entry.id] = self.check_ins.pop(DRAFT_KEY)

        logger.info("saved decision %s (%s, score %s)", entry.id, entry.recommendation, entry.score)
        return entry

    # ----------------------------
    # Follow-up
    # ----------------------------
    def save_follow_up(self, decision_id: str, action_taken: str, regret: bool, outcome: str) -> SavedDecision:
        follow_up = FollowUp(action_taken=action_taken, regret=bool(regret), outcome=outcome, updated_at=now_iso())

        if self.is_local:
            self._commit_local(self._replace(decision_id, follow_up=follow_up))
        else:
            self.get(decision_id)
            self.store.create_or_replace_follow_up(decision_id, {
                "action_taken": action_taken,
                "regret": bool(regret),
                "outcome": outcome,
            })
            self.load()

        return self.get(decision_id)

    # ----------------------------
    # Action plan
    # ----------------------------
    def ensure_action_plan(self, decision_id: str) -> ActionPlan:
        d = self.get(decision_id)
        if d.action_plan is not None:
            return d.action_plan
        return self._write_plan(decision_id, default_action_plan_template(d.recommendation))

    def update_action_plan(self, decision_id: str, updater: Callable[[ActionPlan], ActionPlan]) -> ActionPlan:
        current = self.ensure_action_plan(decision_id)
        return self._write_plan(decision_id, updater(current))

    def _write_plan(self, decision_id: str, plan: ActionPlan) -> ActionPlan:
        new_list = self._replace(decision_id, action_plan=plan)
        if self.is_local:
            self._commit_local(new_list)
            return plan

        # last write wins; on failure reload so memory matches the store again
        self.decisions = new_list
        try:
            self.store.upsert_action_plan(decision_id, [i.to_dict() for i in plan.items])
        except StorageError:
            logger.warning("action plan write failed for %s; reloading", decision_id)
            self.load()
            raise
        return plan

    def add_plan_item(self, decision_id: str, text: str = "") -> ActionPlan:
        return self.update_action_plan(decision_id, lambda p: add_item(p, text))

    def edit_plan_item(self, decision_id: str, item_id: str, text: str) -> ActionPlan:
        return self.update_action_plan(decision_id, lambda p: edit_item(p, item_id, text))

    def toggle_plan_item(self, decision_id: str, item_id: str) -> ActionPlan:
        return self.update_action_plan(decision_id, lambda p: toggle_item(p, item_id))

    def remove_plan_item(self, decision_id: str, item_id: str) -> ActionPlan:
        return self.update_action_plan(decision_id, lambda p: remove_item(p, item_id))

    def restore_plan_template(self, decision_id: str) -> ActionPlan:
        d = self.get(decision_id)
        # destructive: prior items and their done flags are discarded
        return self._write_plan(decision_id, default_action_plan_template(d.recommendation))

    # ----------------------------
    # Check-in
    # ----------------------------
    def record_check_in(self, decision_id: str, check_in: CheckIn) -> CheckIn:
        if not check_in.completed_at:
            check_in = replace(check_in, completed_at=now_iso())
        self.check_ins[decision_id] = check_in
        return check_in

    def get_check_in(self, decision_id: str) -> Optional[CheckIn]:
        return self.check_ins.get(decision_id)
