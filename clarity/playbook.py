from dataclasses import dataclass
from typing import Dict, List, Optional

from .storage import new_id, now_iso
from .types import (
    ACTUAR_HOY,
    DEFAULT_DECISION_TYPE,
    DESCARTAR,
    ESPERAR_7_DIAS,
    PREPARAR_PLAN,
    ActionPlan,
    ActionPlanItem,
)


@dataclass(frozen=True)
class PlaybookEntry:
    diagnosis: str
    action_title: str
    next_step: str
    playbook_steps: List[str]


RECOMMENDATION_LABEL = {
    ACTUAR_HOY: "Actúa hoy, pero con un paso pequeño.",
    PREPARAR_PLAN: "No tomes la decisión irreversible aún. Prepara un plan concreto.",
    ESPERAR_7_DIAS: "Espera 7 días y revisa esta decisión con menos ruido.",
    DESCARTAR: "Hoy no vale el costo. Mejor no avanzar.",
}

ACTION_MODE_LABEL = {
    ACTUAR_HOY: "Actuar hoy",
    PREPARAR_PLAN: "Preparar plan",
    ESPERAR_7_DIAS: "Esperar 7 días",
    DESCARTAR: "No avanzar",
}

ACTION_FRIENDLY_PHRASE = {
    ACTUAR_HOY: "Actúa hoy con un paso sencillo.",
    PREPARAR_PLAN: "Prepara un plan detallado.",
    ESPERAR_7_DIAS: "Espera 7 días y revisa con datos.",
    DESCARTAR: "No avanzar por ahora.",
}

FIRST_STEP_SUGGESTION = {
    ACTUAR_HOY: "Reserva tiempo hoy para escribir tu plan mínimo.",
    PREPARAR_PLAN: "Anota riesgos y mitigaciones.",
    ESPERAR_7_DIAS: "Define los datos faltantes y cómo obtenerlos.",
    DESCARTAR: "Libera espacio mental y revisa en 30 días.",
}

SMALL_STEP_LABEL = {
    ACTUAR_HOY: "Da el primer paso concreto hoy (menos de 30 minutos).",
    PREPARAR_PLAN: "Define 3 riesgos y cómo mitigarlos antes de decidir.",
    ESPERAR_7_DIAS: "Anota qué información necesitas y revísalo en 7 días.",
    DESCARTAR: "Si en 30 días sigue importando, reevalúalo.",
}

ACTION_TAKEN_LABEL = {
    "actue": "Actué",
    "espere": "Esperé",
    "descarte": "Lo descarté",
}

OUTCOME_LABEL = {
    "mejor": "Mejor",
    "igual": "Igual",
    "peor": "Peor",
}

DECISION_TYPE_LABEL = {
    "compra": "Compra",
    "carrera": "Carrera",
    "relacion": "Relación",
    "proyecto": "Proyecto",
    "salud": "Salud",
    "otra": "Otra",
}

ACTION_PLAN_TEMPLATES: Dict[str, List[str]] = {
    ACTUAR_HOY: [
        "Define el primer paso (30 min)",
        "Hazlo hoy",
        "Revisa cómo te sientes",
    ],
    PREPARAR_PLAN: [
        "Escribe 3 riesgos y mitigaciones",
        "Define plan mínimo (qué, cuándo)",
        "Agenda fecha de decisión",
    ],
    ESPERAR_7_DIAS: [
        "Anota qué información falta",
        "Haz plan de recolección de info",
        "Revisa en 7 días",
    ],
    DESCARTAR: [
        "Escribe por qué no vale el costo",
        "Archiva por ahora",
        "Reevalúa si cambia la información",
    ],
}


def default_action_plan_template(recommendation: str, now: Optional[str] = None) -> ActionPlan:
    """Fresh 3-step plan for a recommendation; unknown codes get the wait-7-days steps."""
    now = now or now_iso()
    texts = ACTION_PLAN_TEMPLATES.get(recommendation, ACTION_PLAN_TEMPLATES[ESPERAR_7_DIAS])
    return ActionPlan(
        items=[ActionPlanItem(id=new_id("item"), text=t, done=False) for t in texts],
        created_at=now,
        updated_at=now,
    )


_ACT_DIAGNOSIS = "Alta convicción y bajo costo de error."
_ACT_NEXT = "Da un paso concreto en las próximas 24 h."
_DROP_DIAGNOSIS = "Baja convicción o alto costo; mejor no avanzar hoy."

PLAYBOOK: Dict[str, Dict[str, PlaybookEntry]] = {
    ACTUAR_HOY: {
        "compra": PlaybookEntry(_ACT_DIAGNOSIS, "Actuar hoy", _ACT_NEXT, [
            "Fija un tope de gasto antes de pagar.",
            "Si supera el tope, espera 24 h y repasa necesidad.",
        ]),
        "carrera": PlaybookEntry(_ACT_DIAGNOSIS, "Actuar hoy", _ACT_NEXT, [
            "Envía un mensaje o correo que avance (reunión, CV, pregunta).",
            "Anota el siguiente paso y fecha límite.",
        ]),
        "relacion": PlaybookEntry(_ACT_DIAGNOSIS, "Actuar hoy", _ACT_NEXT, [
            "Haz una acción pequeña y clara (mensaje, llamada, propuesta).",
            "Define qué necesitas a cambio y en qué plazo.",
        ]),
        "proyecto": PlaybookEntry(_ACT_DIAGNOSIS, "Actuar hoy", _ACT_NEXT, [
            "Bloquea 30 min hoy para el primer paso real.",
            "Cierra el paso en una frase y compártelo con alguien.",
        ]),
        "salud": PlaybookEntry(_ACT_DIAGNOSIS, "Actuar hoy", _ACT_NEXT, [
            "Agenda o ejecuta una sola acción (cita, compra, llamada).",
            "Anota el siguiente paso para esta semana.",
        ]),
        "otra": PlaybookEntry(_ACT_DIAGNOSIS, "Actuar hoy", _ACT_NEXT, [
            "Da el primer paso concreto hoy (menos de 30 minutos).",
            "Define el siguiente paso y una fecha.",
        ]),
    },
    PREPARAR_PLAN: {
        "compra": PlaybookEntry(
            "Decisión con alto costo si sale mal.",
            "Preparar plan",
            "No pagues aún; prepara criterios y plan B.",
            [
                "Lista 3 riesgos (financiero, uso, arrepentimiento).",
                "Define presupuesto máximo y regla de salida.",
            ],
        ),
        "carrera": PlaybookEntry(
            "Decisión difícil de revertir con alto costo.",
            "Preparar plan",
            "No renuncies ni firmes aún; prepara plan B.",
            [
                "Define tu runway (meses de caja).",
                "Activa plan B: 3 conversaciones o entrevistas.",
                "Fija una fecha de decisión (7–14 días).",
            ],
        ),
        "relacion": PlaybookEntry(
            "Decisión con alto impacto emocional.",
            "Preparar plan",
            "No actúes por impulso; prepara qué quieres decir y qué necesitas.",
            [
                "Escribe en una frase qué quieres lograr.",
                "Define 3 escenarios (sí / no / aplazar) y qué harías.",
            ],
        ),
        "proyecto": PlaybookEntry(
            "Decisión difícil de revertir con alto costo.",
            "Preparar plan",
            "No comprometas recursos grandes aún; diseña el plan.",
            [
                "Lista 3 riesgos principales y cómo mitigarlos.",
                "Define un hito de «no seguir» y fecha de revisión.",
            ],
        ),
        "salud": PlaybookEntry(
            "Decisión con alto impacto en tu bienestar.",
            "Preparar plan",
            "No cambies todo de golpe; prepara pasos y respaldo.",
            [
                "Anota qué quieres lograr y en qué plazo.",
                "Consulta o investiga una alternativa antes de decidir.",
            ],
        ),
        "otra": PlaybookEntry(
            "Decisión difícil de revertir o con alto costo.",
            "Preparar plan",
            "Prepara un plan antes de actuar.",
            [
                "Define 3 riesgos y cómo mitigarlos.",
                "Fija una fecha de decisión y criterios de salida.",
            ],
        ),
    },
    ESPERAR_7_DIAS: {
        "compra": PlaybookEntry(
            "Poca evidencia o presión; conviene esperar.",
            "Esperar 7 días",
            "No compres hoy; revisa en 7 días con calma.",
            [
                "Espera 24 h antes de pagar (mínimo).",
                "Define presupuesto máximo.",
                "Si aún lo quieres, aplica regla 1-in-1-out.",
            ],
        ),
        "carrera": PlaybookEntry(
            "Poca evidencia o alta presión; conviene esperar.",
            "Esperar 7 días",
            "No renuncies ni aceptes hoy; revisa en 7 días.",
            [
                "Anota qué información te falta.",
                "Pon recordatorio en 7 días.",
                "Revisa con calma antes de decidir.",
            ],
        ),
        "relacion": PlaybookEntry(
            "Poca evidencia o presión emocional; conviene esperar.",
            "Esperar 7 días",
            "No actúes hoy; revisa en 7 días con menos ruido.",
            [
                "Anota qué quieres decir y qué necesitas saber.",
                "Pon recordatorio en 7 días.",
                "Revisa si sigues queriendo lo mismo.",
            ],
        ),
        "proyecto": PlaybookEntry(
            "Poca evidencia o presión; conviene esperar.",
            "Esperar 7 días",
            "No comprometas hoy; revisa en 7 días.",
            [
                "Anota qué información necesitas.",
                "Pon recordatorio en 7 días.",
                "Revisa con calma antes de decidir.",
            ],
        ),
        "salud": PlaybookEntry(
            "Poca evidencia o presión; conviene esperar.",
            "Esperar 7 días",
            "No cambies nada drástico hoy; revisa en 7 días.",
            [
                "Anota qué te gustaría lograr.",
                "Pon recordatorio en 7 días.",
                "Revisa con calma y con datos si es posible.",
            ],
        ),
        "otra": PlaybookEntry(
            "Incertidumbre moderada; conviene esperar.",
            "Esperar 7 días",
            "Revisa en 7 días con menos ruido.",
            [
                "Anota qué información necesitas.",
                "Pon recordatorio en 7 días.",
                "Revisa con calma antes de decidir.",
            ],
        ),
    },
    DESCARTAR: {
        "compra": PlaybookEntry(
            _DROP_DIAGNOSIS,
            "No avanzar",
            "No compres hoy; si en 30 días sigue importando, reevalúa.",
            [
                "Anota el ítem por si reaparece.",
                "Revisa en 30 días si sigue siendo prioridad.",
            ],
        ),
        "carrera": PlaybookEntry(
            _DROP_DIAGNOSIS,
            "No avanzar",
            "No cambies nada hoy; si en 30 días sigue importando, reevalúa.",
            [
                "Anota la idea o opción por si reaparece.",
                "Enfoca en tu prioridad actual.",
                "Revisa en 30 días si sigue siendo relevante.",
            ],
        ),
        "relacion": PlaybookEntry(
            "Baja convicción o alto costo emocional; mejor no avanzar hoy.",
            "No avanzar",
            "No actúes por obligación; si en 30 días sigue importando, reevalúa.",
            [
                "Anota qué sentiste o quisiste.",
                "Revisa en 30 días si sigue siendo importante.",
            ],
        ),
        "proyecto": PlaybookEntry(
            _DROP_DIAGNOSIS,
            "No avanzar",
            "No inviertas tiempo hoy; si en 30 días sigue importando, reevalúa.",
            [
                "Deja anotado por si reaparece.",
                "Enfoca en el proyecto con más tracción.",
                "Revisa en 30 días si sigue siendo prioridad.",
            ],
        ),
        "salud": PlaybookEntry(
            _DROP_DIAGNOSIS,
            "No avanzar",
            "No cambies nada hoy; si en 30 días sigue importando, reevalúa.",
            [
                "Anota la meta o cambio por si reaparece.",
                "Revisa en 30 días con calma.",
            ],
        ),
        "otra": PlaybookEntry(
            "Baja convicción; mejor no avanzar hoy.",
            "No avanzar",
            "Si en 30 días sigue importando, reevalúalo.",
            [
                "Deja anotado por si reaparece.",
                "Revisa en 30 días si sigue importando.",
            ],
        ),
    },
}


def get_playbook(recommendation: str, decision_type: Optional[str]) -> PlaybookEntry:
    by_rec = PLAYBOOK.get(recommendation)
    if by_rec is None:
        return PlaybookEntry(
            diagnosis="Revisa los factores y vuelve a evaluar.",
            action_title=recommendation,
            next_step="Define tu próximo paso.",
            playbook_steps=["Anota qué necesitas para decidir.", "Revisa en 7 días."],
        )
    return by_rec.get(decision_type or DEFAULT_DECISION_TYPE, by_rec[DEFAULT_DECISION_TYPE])
