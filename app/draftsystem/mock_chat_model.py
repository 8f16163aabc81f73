# app/draftsystem/mock_chat_model.py
"""
Offline keyword-based chat model for development without API credentials.
Produces a JSON draft from the symptoms line of the prompt.
NOT real medical advice.
"""
import json
import logging
import re
from typing import Any, List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult

logger = logging.getLogger(__name__)

_SYMPTOMS_LINE = re.compile(r"Current Symptoms:\s*(.+)", re.IGNORECASE)

# (keywords, diagnosis prefix, medications, advice); first match wins
KEYWORD_RULES = [
    (
        ("fever", "temperature"),
        "Fever - Possible viral infection",
        [
            {"name": "Paracetamol", "dosage": "500mg", "frequency": "Every 6 hours as needed", "duration": "3-5 days"},
            {"name": "Ibuprofen", "dosage": "400mg", "frequency": "Every 8 hours with food", "duration": "3-5 days"},
        ],
        "Rest, stay hydrated, monitor temperature. Seek immediate care if fever exceeds 103°F.",
    ),
    (
        ("cough", "cold"),
        "Upper Respiratory Tract Infection",
        [
            {"name": "Dextromethorphan", "dosage": "10ml", "frequency": "Every 6 hours", "duration": "5-7 days"},
            {"name": "Cetirizine", "dosage": "10mg", "frequency": "Once daily at bedtime", "duration": "7 days"},
        ],
        "Stay hydrated, use humidifier, avoid cold drinks. Rest your voice if throat is sore.",
    ),
    (
        ("headache", "migraine"),
        "Headache/Migraine",
        [
            {"name": "Ibuprofen", "dosage": "400mg", "frequency": "Every 8 hours with food", "duration": "As needed"},
            {"name": "Paracetamol", "dosage": "500mg", "frequency": "Every 6 hours", "duration": "As needed"},
        ],
        "Rest in dark, quiet room. Stay hydrated. Avoid screen time. Apply cold compress to forehead.",
    ),
    (
        ("stomach", "nausea", "vomit"),
        "Gastric distress",
        [
            {"name": "Omeprazole", "dosage": "20mg", "frequency": "Once daily before breakfast", "duration": "7 days"},
            {"name": "Ondansetron", "dosage": "4mg", "frequency": "Every 8 hours as needed", "duration": "3 days"},
        ],
        "Eat bland foods, avoid spicy/fatty foods. Stay hydrated with small sips of water.",
    ),
    (
        ("pain", "ache"),
        "Pain management",
        [
            {"name": "Ibuprofen", "dosage": "400mg", "frequency": "Every 8 hours with food", "duration": "5-7 days"},
            {"name": "Paracetamol", "dosage": "500mg", "frequency": "Every 6 hours", "duration": "5-7 days"},
        ],
        "Apply ice/heat as appropriate. Rest affected area. Avoid strenuous activity.",
    ),
]

DEFAULT_RULE = (
    "General symptoms requiring evaluation",
    [
        {"name": "Paracetamol", "dosage": "500mg", "frequency": "Three times daily", "duration": "5-7 days"},
        {"name": "Multivitamin", "dosage": "1 tablet", "frequency": "Once daily with food", "duration": "30 days"},
    ],
    "Monitor symptoms closely. Maintain good hygiene and adequate rest.",
)


def build_mock_draft(symptoms: str) -> dict:
    """Keyword-matched draft for the given symptoms."""
    lowered = symptoms.lower()
    diagnosis, medications, advice = DEFAULT_RULE
    for keywords, rule_diagnosis, rule_medications, rule_advice in KEYWORD_RULES:
        if any(keyword in lowered for keyword in keywords):
            diagnosis, medications, advice = rule_diagnosis, rule_medications, rule_advice
            break

    return {
        "diagnosis": f"{diagnosis} based on symptoms: {symptoms[:60]}",
        "medications": medications,
        "advice": f"{advice} MOCK PRESCRIPTION - For testing only, not real medical advice!",
        "followUp": "Follow up in 1 week if symptoms persist or worsen.",
    }


class KeywordMockChatModel(BaseChatModel):
    """Chat model stand-in that answers every prompt with a JSON draft."""

    model_name: str = "keyword-mock"

    @property
    def _llm_type(self) -> str:
        return "keyword-mock"

    def _generate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Any = None,
        **kwargs: Any,
    ) -> ChatResult:
        prompt = str(messages[-1].content) if messages else ""
        match = _SYMPTOMS_LINE.search(prompt)
        symptoms = match.group(1).strip() if match else prompt.strip()

        logger.warning("⚠️  Using MOCK draft model - Not real AI!")
        content = json.dumps(build_mock_draft(symptoms), indent=2)
        return ChatResult(generations=[ChatGeneration(message=AIMessage(content=content))])
