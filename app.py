import os
import streamlit as st

# Must be first Streamlit call
st.set_page_config(page_title="Decision Fitness", layout="wide")

# ----------------------------
# Imports (engine)
# ----------------------------
from clarity.config import build_journal, load_settings, setup_logging
from clarity.checkin import CHECK_IN_DAYS, CLARITY_DIRECTION_LABEL, DRAFT_KEY, CheckIn, days_since
from clarity.scoring import evaluate, get_diagnostic_line, get_reason, ENGINE_VERSION
from clarity.playbook import (
    ACTION_FRIENDLY_PHRASE,
    ACTION_MODE_LABEL,
    ACTION_TAKEN_LABEL,
    DECISION_TYPE_LABEL,
    FIRST_STEP_SUGGESTION,
    OUTCOME_LABEL,
    RECOMMENDATION_LABEL,
    SMALL_STEP_LABEL,
    default_action_plan_template,
    get_playbook,
)
from clarity.questionnaire import (
    COST_LEVELS,
    EMOTIONAL_STATES,
    EVIDENCE_LEVELS,
    LAST_STAGE,
    PRESSURE_LABEL,
    PRESSURE_OPTIONS,
    STAGE_TRANSITIONS,
    Questionnaire,
    StageError,
    next_stage,
    quick_form_input,
    to_decision_input,
)
from clarity.lifecycle import MAX_PLAN_ITEMS, PlanLimitError, add_item, edit_item, toggle_item
from clarity.storage import StorageError, now_iso
from clarity.analytics import (
    compute_dashboard,
    format_delta,
    interpretation_arrepentimiento,
    interpretation_claridad,
    interpretation_confianza,
)
from clarity.explain import (
    format_friendly_date,
    get_input_display,
    get_replay_evaluation_text,
    get_stored_diagnostic,
    truncate,
)
from clarity.pdf_report import write_decision_report
from clarity.types import ACTIONS_TAKEN, DECISION_TYPES, OUTCOMES, REVERSIBILITY

SETTINGS = load_settings()
setup_logging(SETTINGS.log_level)

os.makedirs(SETTINGS.data_dir, exist_ok=True)
os.makedirs(SETTINGS.reports_dir, exist_ok=True)

SAVE_ERROR = "No se pudo guardar. Reintenta."

# ----------------------------
# Session state
# ----------------------------
if "journal" not in st.session_state:
    st.session_state.journal = build_journal(SETTINGS)
if "questionnaire" not in st.session_state:
    st.session_state.questionnaire = Questionnaire()
if "form_stage" not in st.session_state:
    st.session_state.form_stage = 1
if "result" not in st.session_state:
    st.session_state.result = None
if "draft_plan" not in st.session_state:
    st.session_state.draft_plan = None
if "quick" not in st.session_state:
    st.session_state.quick = None

journal = st.session_state.journal

st.markdown(
    """
<style>
.block-container { padding-top: 1.1rem; padding-bottom: 2rem; }
h1, h2, h3 { letter-spacing: -0.02em; }
.rec-card {
  padding: 1rem 1rem;
  border-radius: 16px;
  border: 1px solid rgba(0,0,0,0.08);
  background: rgba(255,255,255,0.75);
}
.rec-title { font-weight: 800; font-size: 1.1rem; margin-bottom: 0.25rem; }
</style>
""",
    unsafe_allow_html=True,
)

# ----------------------------
# Helpers
# ----------------------------
def badge(text: str, tone: str = "neutral"):
    tones = {
        "neutral": ("#111827", "#E5E7EB"),
        "good": ("#065F46", "#D1FAE5"),
        "warn": ("#92400E", "#FEF3C7"),
        "bad": ("#7F1D1D", "#FEE2E2"),
        "info": ("#1E3A8A", "#DBEAFE"),
    }
    fg, bg = tones.get(tone, tones["neutral"])
    st.markdown(
        f"""
        <span style="
            display:inline-block;
            padding:0.25rem 0.55rem;
            border-radius:999px;
            font-size:0.80rem;
            font-weight:600;
            color:{fg};
            background:{bg};
        ">{text}</span>
        """,
        unsafe_allow_html=True,
    )


def rec_tone(recommendation: str) -> str:
    return {
        "ACTUAR_HOY": "good",
        "PREPARAR_PLAN": "info",
        "ESPERAR_7_DIAS": "warn",
        "DESCARTAR": "bad",
    }.get(recommendation, "neutral")


def section_title(title: str, subtitle: str = ""):
    st.markdown(f"### {title}")
    if subtitle:
        st.caption(subtitle)


def reset_draft():
    st.session_state.questionnaire = Questionnaire()
    st.session_state.form_stage = 1
    st.session_state.result = None
    st.session_state.draft_plan = None
    journal.check_ins.pop(DRAFT_KEY, None)


def save_decision(q: Questionnaire, input=None, action_plan=None):
    if journal.count() >= SETTINGS.free_limit:
        st.warning(f"Llegaste al límite de {SETTINGS.free_limit} decisiones del plan gratuito.")
        return None
    try:
        return journal.save(q, input=input, action_plan=action_plan)
    except StorageError:
        st.error(SAVE_ERROR)
        return None


def render_playbook(recommendation: str, decision_type: str):
    pb = get_playbook(recommendation, decision_type)
    st.write("**Diagnóstico:**", pb.diagnosis)
    st.write("**Próximo paso:**", pb.next_step)
    for step in pb.playbook_steps:
        st.write(f"- {step}")


def render_check_in(decision_id: str, created_at: str, key_prefix: str):
    existing = journal.get_check_in(decision_id)
    st.markdown(f"#### Check-in en {CHECK_IN_DAYS} días")
    if existing:
        st.caption("Completado")
        st.write("Claridad:", CLARITY_DIRECTION_LABEL.get(existing.clarity_direction, existing.clarity_direction))
        return

    day = days_since(created_at)
    st.progress(day / CHECK_IN_DAYS, text=f"Día {day}/{CHECK_IN_DAYS}")
    with st.form(f"{key_prefix}_checkin"):
        what_changed = st.text_input("¿Qué cambió?")
        direction = st.radio(
            "Tu claridad…",
            list(CLARITY_DIRECTION_LABEL.keys()),
            format_func=lambda k: CLARITY_DIRECTION_LABEL[k],
            horizontal=True,
            index=1,
        )
        new_data = st.text_input("¿Qué dato nuevo tienes?")
        if st.form_submit_button("Guardar check-in"):
            journal.record_check_in(
                decision_id,
                CheckIn(what_changed=what_changed.strip(), clarity_direction=direction, new_data=new_data.strip()),
            )
            st.rerun()


# ----------------------------
# Pages
# ----------------------------
def page_new_decision():
    q: Questionnaire = st.session_state.questionnaire
    stage = st.session_state.form_stage

    st.subheader("Nueva decisión")
    q.decision_text = st.text_input("¿Qué estás decidiendo?", value=q.decision_text, key="decision_text")
    q.decision_type = st.selectbox(
        "Tipo de decisión",
        DECISION_TYPES,
        index=DECISION_TYPES.index(q.decision_type) if q.decision_type in DECISION_TYPES else len(DECISION_TYPES) - 1,
        format_func=lambda k: DECISION_TYPE_LABEL[k],
    )

    st.progress(stage / LAST_STAGE, text=f"Paso {stage} de {LAST_STAGE}")

    if stage == 1:
        q.objective = st.text_area("¿Qué quieres lograr con esta decisión?", value=q.objective)
    elif stage == 2:
        for i in range(len(q.alternatives)):
            q.alternatives[i] = st.text_input(f"Alternativa {i + 1}", value=q.alternatives[i], key=f"alt_{i}")
        if len(q.alternatives) < 5 and st.button("+ Agregar alternativa"):
            q.alternatives.append("")
            st.rerun()
    elif stage == 3:
        q.evidence_for = st.text_area("Evidencia a favor", value=q.evidence_for)
        q.evidence_missing = st.text_area("Falta por confirmar", value=q.evidence_missing)
    elif stage == 4:
        q.cost_level = st.radio("Costo si sale mal", COST_LEVELS, index=COST_LEVELS.index(q.cost_level), horizontal=True)
        q.reversibility = st.radio(
            "¿Se puede revertir?", REVERSIBILITY, index=REVERSIBILITY.index(q.reversibility), horizontal=True
        )
    else:
        q.emotional_state = st.radio(
            "¿Cómo te sientes?", EMOTIONAL_STATES, index=EMOTIONAL_STATES.index(q.emotional_state), horizontal=True
        )

    c1, c2 = st.columns(2)
    with c1:
        if stage > 1 and st.button("Atrás"):
            st.session_state.form_stage = stage - 1
            st.rerun()
    with c2:
        if stage < LAST_STAGE:
            if st.button("Siguiente", type="primary"):
                try:
                    st.session_state.form_stage = next_stage(q, stage)
                    st.toast(STAGE_TRANSITIONS[stage])
                    st.rerun()
                except StageError as e:
                    st.warning(str(e))
        elif st.button("Ver resultado", type="primary"):
            result = evaluate(to_decision_input(q))
            st.session_state.result = result
            st.session_state.draft_plan = default_action_plan_template(result.recommendation)

    if st.session_state.result:
        render_result(q)


def render_result(q: Questionnaire):
    result = st.session_state.result
    st.divider()
    section_title("Resultado", get_diagnostic_line(to_decision_input(q)))

    c1, c2 = st.columns([1, 2])
    with c1:
        st.metric("Claridad", f"{result.score} / 100")
        badge(ACTION_MODE_LABEL.get(result.recommendation, result.recommendation), rec_tone(result.recommendation))
    with c2:
        st.markdown(
            f'<div class="rec-card"><div class="rec-title">{ACTION_FRIENDLY_PHRASE.get(result.recommendation, "")}</div>'
            f"{result.reason}</div>",
            unsafe_allow_html=True,
        )
        st.caption(f"Primer paso: {FIRST_STEP_SUGGESTION.get(result.recommendation, '')}")

    render_playbook(result.recommendation, q.decision_type)

    st.markdown("#### Plan de acción")
    plan = st.session_state.draft_plan
    for item in plan.items:
        cc1, cc2 = st.columns([1, 12])
        with cc1:
            if st.checkbox(" ", value=item.done, key=f"draft_done_{item.id}", label_visibility="collapsed") != item.done:
                st.session_state.draft_plan = toggle_item(plan, item.id)
                st.rerun()
        with cc2:
            text = st.text_input("Paso", value=item.text, key=f"draft_text_{item.id}", label_visibility="collapsed")
            if text != item.text:
                st.session_state.draft_plan = edit_item(plan, item.id, text)
    c1, c2 = st.columns(2)
    with c1:
        if st.button("+ Agregar paso", disabled=len(plan.items) >= MAX_PLAN_ITEMS, key="draft_add"):
            st.session_state.draft_plan = add_item(plan)
            st.rerun()
    with c2:
        if st.button("Restaurar plantilla", key="draft_restore"):
            st.session_state.draft_plan = default_action_plan_template(result.recommendation)
            st.rerun()

    st.divider()
    render_check_in(DRAFT_KEY, now_iso(), key_prefix="draft")

    st.divider()
    if st.button("Guardar decisión", type="primary", use_container_width=True):
        saved = save_decision(q, action_plan=st.session_state.draft_plan)
        if saved:
            reset_draft()
            st.success(f"Decisión guardada ({saved.score}/100).")


def page_quick_evaluation():
    st.subheader("Evaluación rápida")
    st.caption("Tres preguntas para una primera lectura. Usa «Nueva decisión» para el recorrido completo.")

    with st.form("quick_form"):
        text = st.text_input("¿Qué estás decidiendo?")
        evidence = st.radio("¿Cuánta evidencia tienes?", EVIDENCE_LEVELS, index=1, horizontal=True)
        cost = st.radio("Costo si sale mal", COST_LEVELS, index=1, horizontal=True)
        pressure = st.radio(
            "¿Cómo te sientes?", PRESSURE_OPTIONS, format_func=lambda k: PRESSURE_LABEL[k], horizontal=True
        )
        reversibility = st.radio("¿Se puede revertir?", REVERSIBILITY, index=1, horizontal=True)
        if st.form_submit_button("Ver resultado", type="primary"):
            st.session_state.quick = (text, quick_form_input(evidence, cost, pressure, reversibility))

    if not st.session_state.quick:
        return

    text, inp = st.session_state.quick
    result = evaluate(inp)
    st.divider()
    section_title("Resultado", get_diagnostic_line(inp))

    c1, c2 = st.columns([1, 2])
    with c1:
        st.metric("Claridad", f"{result.score} / 100")
        badge(ACTION_MODE_LABEL.get(result.recommendation, result.recommendation), rec_tone(result.recommendation))
    with c2:
        st.markdown(
            f'<div class="rec-card"><div class="rec-title">{RECOMMENDATION_LABEL.get(result.recommendation, "")}</div>'
            f"{get_reason(inp, result.recommendation)}</div>",
            unsafe_allow_html=True,
        )
        st.write("**Paso pequeño:**", SMALL_STEP_LABEL.get(result.recommendation, ""))

    if st.button("Guardar decisión", type="primary", key="quick_save"):
        saved = save_decision(
            Questionnaire(decision_text=text),
            input=inp,
            action_plan=default_action_plan_template(result.recommendation),
        )
        if saved:
            st.session_state.quick = None
            st.success(f"Decisión guardada ({saved.score}/100).")


def page_history():
    st.subheader("Historial")
    decisions = journal.decisions
    st.caption(f"Decisiones guardadas: {len(decisions)}")

    if not decisions:
        st.info("Aún no hay decisiones. Ve a «Nueva decisión» para registrar la primera.")
        return

    labels = {
        d.id: f"{format_friendly_date(d.created_at)} • {truncate(d.decision_text, 48)} • {d.score}"
        for d in decisions
    }
    selected_id = st.selectbox("Decisión", list(labels.keys()), format_func=lambda k: labels[k])

    try:
        journal.ensure_action_plan(selected_id)
    except StorageError:
        st.error(SAVE_ERROR)
    d = journal.get(selected_id)

    c1, c2 = st.columns([1, 2])
    with c1:
        st.metric("Claridad", f"{d.score} / 100")
        badge(ACTION_MODE_LABEL.get(d.recommendation, d.recommendation), rec_tone(d.recommendation))
    with c2:
        st.write("**Decisión:**", d.decision_text)
        st.write("**Recomendación:**", RECOMMENDATION_LABEL.get(d.recommendation, d.recommendation))
        st.write("**Por qué:**", d.reason)
        shown = get_input_display(d.input)
        st.caption(
            f"Convicción {shown['conviccion']} · Costo {shown['costo']} · "
            f"Energía {shown['energia']} · Reversibilidad {shown['reversibilidad']}"
        )
        diagnostic = get_stored_diagnostic(d.input)
        if diagnostic:
            st.caption(diagnostic)

    with st.expander("Playbook"):
        render_playbook(d.recommendation, d.decision_type)

    st.divider()
    render_check_in(d.id, d.created_at, key_prefix=d.id)

    st.divider()
    render_action_plan(d.id)

    st.divider()
    render_follow_up(d.id)

    st.divider()
    if st.button("Generar informe PDF", key=f"pdf_{d.id}"):
        path = os.path.join(SETTINGS.reports_dir, f"{d.id}.pdf")
        write_decision_report(path, journal.get(d.id), journal.get_check_in(d.id))
        with open(path, "rb") as f:
            st.download_button("Descargar PDF", f.read(), file_name=os.path.basename(path), mime="application/pdf")


def render_action_plan(decision_id: str):
    st.markdown("#### Plan de acción")
    plan = journal.get(decision_id).action_plan
    if plan is None or not plan.items:
        st.caption("Define tu primer paso.")
    else:
        for item in plan.items:
            c1, c2 = st.columns([1, 12])
            with c1:
                done = st.checkbox(" ", value=item.done, key=f"done_{item.id}", label_visibility="collapsed")
            with c2:
                text = st.text_input("Paso", value=item.text, key=f"text_{item.id}", label_visibility="collapsed")
            try:
                if done != item.done:
                    journal.toggle_plan_item(decision_id, item.id)
                    st.rerun()
                if text != item.text:
                    journal.edit_plan_item(decision_id, item.id, text)
            except StorageError:
                st.error(SAVE_ERROR)

    n_items = len(plan.items) if plan else 0
    c1, c2 = st.columns(2)
    with c1:
        if st.button("+ Agregar paso", disabled=n_items >= MAX_PLAN_ITEMS, key=f"add_{decision_id}"):
            try:
                journal.add_plan_item(decision_id)
                st.rerun()
            except PlanLimitError as e:
                st.warning(str(e))
            except StorageError:
                st.error(SAVE_ERROR)
    with c2:
        if st.button("Restaurar plantilla", key=f"restore_{decision_id}"):
            try:
                journal.restore_plan_template(decision_id)
                st.rerun()
            except StorageError:
                st.error(SAVE_ERROR)


def render_follow_up(decision_id: str):
    d = journal.get(decision_id)
    st.markdown("#### Seguimiento")
    fu = d.follow_up
    if fu:
        st.write("**Qué hice:**", ACTION_TAKEN_LABEL.get(fu.action_taken, fu.action_taken))
        st.write("**Resultado:**", OUTCOME_LABEL.get(fu.outcome, fu.outcome))
        st.write("**Me arrepiento:**", "Sí" if fu.regret else "No")
        st.info(get_replay_evaluation_text(d.recommendation, fu.action_taken, fu.outcome))

    with st.expander("Editar seguimiento" if fu else "Registrar seguimiento", expanded=fu is None):
        with st.form(f"followup_{decision_id}"):
            action = st.radio(
                "¿Qué hiciste?",
                ACTIONS_TAKEN,
                index=ACTIONS_TAKEN.index(fu.action_taken) if fu and fu.action_taken in ACTIONS_TAKEN else 0,
                format_func=lambda k: ACTION_TAKEN_LABEL[k],
                horizontal=True,
            )
            outcome = st.radio(
                "¿Cómo resultó?",
                OUTCOMES,
                index=OUTCOMES.index(fu.outcome) if fu and fu.outcome in OUTCOMES else 1,
                format_func=lambda k: OUTCOME_LABEL[k],
                horizontal=True,
            )
            regret = st.checkbox("Me arrepiento", value=bool(fu and fu.regret))
            if st.form_submit_button("Guardar seguimiento"):
                try:
                    journal.save_follow_up(decision_id, action, regret, outcome)
                except StorageError:
                    st.error(SAVE_ERROR)
                    return
                st.success("Seguimiento guardado.")
                st.rerun()


def page_metrics():
    st.subheader("Métricas")
    m = compute_dashboard(journal.decisions)

    c1, c2, c3 = st.columns(3)
    with c1:
        st.metric(
            "Claridad",
            m["avg_clarity"] if m["avg_clarity"] is not None else "—",
            delta=format_delta(m["clarity_delta"]),
        )
        if m["clarity_level"]:
            badge(f"Nivel: {m['clarity_level']}", "info")
        st.caption(interpretation_claridad(m["avg_clarity"]))
    with c2:
        st.metric(
            "Confianza",
            m["confianza"] if m["confianza"] is not None else "—",
            delta=format_delta(m["confidence_delta"]),
        )
        if m["confianza_level"]:
            badge(f"Nivel: {m['confianza_level']}", "info")
        if m["avg_doubt"] is not None:
            st.caption(f"Duda promedio: {m['avg_doubt']:.1f} / 10")
        st.caption(interpretation_confianza(m["confianza"]))
    with c3:
        st.metric(
            "Arrepentimiento",
            f"{m['regret_rate']}%" if m["regret_rate"] is not None else "—",
            delta=None,
        )
        if m["regret_level"]:
            badge(f"Nivel: {m['regret_level']}", "warn")
        if m["regret_rate"] is not None:
            st.caption(f"{m['regret_count']} de {m['followed_count']}")
        st.caption(interpretation_arrepentimiento(m["regret_rate"]))

    st.divider()
    st.write("**Confianza del sistema:**", m["system_confidence"])
    if m["avg_alignment"] is not None:
        st.write("**Alineación promedio:**", m["avg_alignment"])

    section_title("Qué mejorar")
    st.write(m["tip"])

    section_title("Insight de la semana")
    st.write(m["weekly_insight"])

    if m["trend_count"] >= 2:
        import pandas as pd

        df = pd.DataFrame({"Claridad": m["clarity_series"], "Confianza": m["confidence_series"]})
        df.index = range(1, len(df) + 1)
        section_title("Tendencia", f"Últimas {m['trend_count']} decisiones, de la más antigua a la más reciente.")
        st.line_chart(df)


def page_about():
    st.subheader("Qué es esto")
    st.write(
        """
Decision Fitness te ayuda a decidir con más claridad:
- Un cuestionario corto (objetivo, alternativas, evidencia, costo, estado emocional)
- Un puntaje de claridad y una recomendación concreta
- Un plan de acción y un check-in a 7 días
- Seguimiento: qué hiciste y si te arrepientes
        """
    )
    st.caption(f"Motor {ENGINE_VERSION} · almacenamiento: {SETTINGS.backend}")


# ----------------------------
# Main app shell
# ----------------------------
st.caption("Decision Fitness — decide con claridad, aprende de tus decisiones.")

page = st.sidebar.radio("Navegar", ["Nueva decisión", "Evaluación rápida", "Historial", "Métricas", "Acerca de"], key="nav")

if page == "Evaluación rápida":
    page_quick_evaluation()
elif page == "Historial":
    page_history()
elif page == "Métricas":
    page_metrics()
elif page == "Acerca de":
    page_about()
else:
    page_new_decision()
