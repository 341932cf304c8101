import logging
import os
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import cm
from reportlab.pdfgen import canvas

from .checkin import CLARITY_DIRECTION_LABEL, CheckIn
from .explain import format_friendly_date, get_input_display, get_replay_evaluation_text, get_stored_diagnostic
from .playbook import (
    ACTION_MODE_LABEL,
    ACTION_TAKEN_LABEL,
    DECISION_TYPE_LABEL,
    OUTCOME_LABEL,
    RECOMMENDATION_LABEL,
    get_playbook,
)
from .scoring import ENGINE_VERSION
from .storage import now_iso
from .types import SavedDecision

logger = logging.getLogger(__name__)

LINE_WIDTH = 95


def safe_text(x) -> str:
    return str(x or "").replace("\n", " ").strip()


def split_text(text: str, max_len: int):
    words = text.split()
    if not words:
        return []
    lines = []
    line = ""
    for w in words:
        if len(line) + len(w) + 1 <= max_len:
            line = (line + " " + w).strip()
        else:
            lines.append(line)
            line = w
    if line:
        lines.append(line)
    return lines


def write_decision_report(output_path: str, decision: SavedDecision, check_in: Optional[CheckIn] = None) -> str:
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)

    c = canvas.Canvas(output_path, pagesize=A4)
    width, height = A4
    y = height - 2 * cm

    def new_page_if_needed():
        nonlocal y
        if y < 3 * cm:
            c.showPage()
            y = height - 2 * cm
            c.setFont("Helvetica", 11)

    def heading(title: str):
        nonlocal y
        y -= 0.3 * cm
        new_page_if_needed()
        c.setFont("Helvetica-Bold", 12)
        c.drawString(2 * cm, y, title)
        y -= 0.8 * cm
        c.setFont("Helvetica", 11)

    def text(line: str):
        nonlocal y
        for chunk in split_text(line, LINE_WIDTH) or [""]:
            c.drawString(2 * cm, y, chunk)
            y -= 0.55 * cm
            new_page_if_needed()

    # Header
    c.setFont("Helvetica-Bold", 18)
    c.drawString(2 * cm, y, "Decision Fitness — Informe de decisión")
    y -= 1.0 * cm
    c.setFont("Helvetica", 10)
    c.drawString(2 * cm, y, f"Generado: {now_iso()} | Motor {ENGINE_VERSION}")
    y -= 1.2 * cm

    heading("Resumen")
    text(f"Decisión: {safe_text(decision.decision_text)}")
    text(f"Fecha: {format_friendly_date(decision.created_at)}")
    text(f"Tipo: {DECISION_TYPE_LABEL.get(decision.decision_type or 'otra', decision.decision_type)}")
    text(f"Claridad: {decision.score} / 100")
    text(f"Recomendación: {ACTION_MODE_LABEL.get(decision.recommendation, decision.recommendation)}")
    if decision.recommendation in RECOMMENDATION_LABEL:
        text(RECOMMENDATION_LABEL[decision.recommendation])
    text(f"Por qué: {safe_text(decision.reason)}")

    heading("Factores")
    shown = get_input_display(decision.input)
    text(f"Convicción: {shown['conviccion']} | Costo si sale mal: {shown['costo']}")
    text(f"Energía: {shown['energia']} | Reversibilidad: {shown['reversibilidad']}")
    diagnostic = get_stored_diagnostic(decision.input)
    if diagnostic:
        text(diagnostic)

    pb = get_playbook(decision.recommendation, decision.decision_type)
    heading("Playbook")
    text(f"Diagnóstico: {pb.diagnosis}")
    text(f"Próximo paso: {pb.next_step}")
    for step in pb.playbook_steps:
        text(f"- {step}")

    heading("Plan de acción")
    if decision.action_plan and decision.action_plan.items:
        for item in decision.action_plan.items:
            mark = "[x]" if item.done else "[ ]"
            text(f"{mark} {safe_text(item.text) or '(sin texto)'}")
    else:
        text("Sin plan de acción.")

    heading("Check-in")
    if check_in:
        text(f"Claridad: {CLARITY_DIRECTION_LABEL.get(check_in.clarity_direction, check_in.clarity_direction)}")
        if check_in.what_changed:
            text(f"Qué cambió: {safe_text(check_in.what_changed)}")
        if check_in.new_data:
            text(f"Datos nuevos: {safe_text(check_in.new_data)}")
    else:
        text("Sin check-in.")

    heading("Seguimiento")
    fu = decision.follow_up
    if fu:
        text(f"Qué hice: {ACTION_TAKEN_LABEL.get(fu.action_taken, fu.action_taken)}")
        text(f"Resultado: {OUTCOME_LABEL.get(fu.outcome, fu.outcome)}")
        text(f"Me arrepiento: {'Sí' if fu.regret else 'No'}")
        text(get_replay_evaluation_text(decision.recommendation, fu.action_taken, fu.outcome))
    else:
        text("Aún no registrado.")

    c.showPage()
    c.save()
    logger.info("wrote report for %s to %s", decision.id, output_path)
    return output_path
