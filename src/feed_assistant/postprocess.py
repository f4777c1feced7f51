"""Whole-message clean-up applied to assistant replies before display."""
from __future__ import annotations

import logging
import re
from typing import Iterable, List

from .config import MAX_RESPONSE_CHARS, MIDDLEWARE_MAX_CHARS
from .datamodels import Message

logger = logging.getLogger("feed_assistant")

LEAK_REDACTION_MARKER = "[data processed]"
ELLIPSIS = "…"

LEAK_PATTERNS: List[re.Pattern] = [
    # { "key": "value", ... }
    re.compile(
        r'\{\s*"[^"]+"\s*:\s*("[^"]*"|[0-9]+|true|false|\[.*\]|\{.*\})'
        r'\s*(,\s*"[^"]+"\s*:\s*("[^"]*"|[0-9]+|true|false|\[.*\]|\{.*\}))*\s*\}'
    ),
    # ["value1", "value2"]
    re.compile(
        r'\[\s*("[^"]*"|[0-9]+|true|false|\{.*\})'
        r'(,\s*("[^"]*"|[0-9]+|true|false|\{.*\}))*\s*\]'
    ),
]

INTRO_PHRASES: List[str] = [
    r"Hello!|Hi!|Welcome!|Welcome to the assistant|Sure!|Of course!|Certainly!|"
    r"No problem!|Got it!|I understand your question|Let me answer your question|"
    r"Here you go|Here is the answer|Here is what I found|Here is|Here's|"
    r"To answer your question|I found some information|I found the following|"
    r"According to the site",
    r"Olá!|Oi!|Bem-vindo!|Bem-vindo ao assistente|Claro!|Com certeza!|Sem problema!|"
    r"Entendi!|Entendi sua pergunta|Vou responder sua pergunta|Vamos lá|"
    r"Aqui está a resposta|Aqui está o que encontrei|Aqui está|Aqui vai|"
    r"Para responder sua pergunta|Deixe-me responder|"
    r"Encontrei algumas informações|Encontrei o seguinte|"
    r"De acordo com o site",
    r"(?:I|I will|I'll|I can)[,\s]+(?:help|assist|tell|explain|show)[,\s]+"
    r"(?:you[,\s]+)?(?:with|about|regarding)",
    r"(?:Eu|Eu vou|Vou|Posso)[,\s]+(?:te|lhe|o|a)[,\s]+(?:ajudar|auxiliar|informar|"
    r"dizer|explicar|mostrar|apresentar)[,\s]+(?:sobre|com|a respeito de)",
    r"I'?m here to help(?: you)?",
    r"Estou aqui para ajudá-lo",
]

OUTRO_PHRASES: List[str] = [
    r"I hope (?:this|that) helps!?|I hope that answers your question|If you need anything else|"
    r"If you have more questions|Can I help with anything else|Let me know if|"
    r"Feel free to ask|I'm here to help|Any questions",
    r"Espero ter ajudado!|Espero ter respondido sua pergunta|"
    r"Se precisar de mais alguma coisa|Se tiver mais dúvidas|"
    r"Posso ajudar com mais alguma coisa|Estou à disposição|Fico à disposição|"
    r"Estou aqui para ajudar|Qualquer dúvida|Qualquer outra dúvida|"
    r"Caso precise de mais informações",
    r"Don't hesitate to ask if you have any other questions",
    r"Não hesite em perguntar se tiver mais alguma dúvida",
]

# A whole run of stacked phrases goes in one substitution.
INTRO_PATTERN = re.compile(
    r"^(?:(?:" + "|".join(INTRO_PHRASES) + r")(?:(?<=!)|(?![\w']))[,:;.!\s]*)+", re.I
)
OUTRO_PATTERN = re.compile(
    r"(?:\s*\b(?:" + "|".join(OUTRO_PHRASES) + r")[^.]*\.?)+\s*$", re.I
)

SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
PARAGRAPH_SPLIT = re.compile(r"\n\n+")


def prevent_data_leakage(message: str) -> str:
    """Replace JSON-like objects and arrays with a placeholder."""
    cleaned = message
    for pattern in LEAK_PATTERNS:
        cleaned = pattern.sub(LEAK_REDACTION_MARKER, cleaned)
    return cleaned


def remove_duplicate_content(message: str) -> str:
    """Drop paragraphs that start with the same five words as an earlier one."""
    if len(message) < 100:
        return message

    unique: List[str] = []
    seen = set()
    for paragraph in PARAGRAPH_SPLIT.split(message):
        normalized = paragraph.strip().lower()
        if len(normalized) < 15:
            unique.append(paragraph)
            continue
        signature = " ".join(normalized.split()[:5])
        if signature not in seen:
            unique.append(paragraph)
            seen.add(signature)
    return "\n\n".join(unique)


def enhance_conciseness(message: str) -> str:
    concise = message
    concise = INTRO_PATTERN.sub("", concise, count=1)
    concise = OUTRO_PATTERN.sub("", concise, count=1)

    unique: List[str] = []
    seen = set()
    for sentence in SENTENCE_SPLIT.split(concise):
        stripped = sentence.strip()
        if len(stripped) < 10:
            unique.append(sentence)
            continue
        signature = " ".join(stripped.lower().split()[:4])
        if signature not in seen:
            unique.append(sentence)
            seen.add(signature)
    return " ".join(unique).strip()


def limit_response_length(message: str, max_chars: int = MAX_RESPONSE_CHARS) -> str:
    """Cap ``message`` at ``max_chars``, preferring to end on a full stop.

    A full stop is used only if it falls in the last quarter of the budget;
    otherwise the text is hard-cut and an ellipsis appended.
    """
    if len(message) <= max_chars:
        return message

    cut_point = message.rfind(".", 0, max_chars + 1)
    if cut_point > max_chars * 0.75:
        return message[: cut_point + 1]
    return message[:max_chars] + ELLIPSIS


def postprocess_message(message: str, max_chars: int = MAX_RESPONSE_CHARS) -> str:
    processed = prevent_data_leakage(message)
    processed = remove_duplicate_content(processed)
    processed = enhance_conciseness(processed)
    return limit_response_length(processed, max_chars)


def apply_security_middleware(messages: Iterable[Message]) -> List[Message]:
    """Clean assistant messages; every other role passes through untouched."""
    out: List[Message] = []
    for msg in messages:
        if msg.role == "assistant":
            content = postprocess_message(msg.content, MIDDLEWARE_MAX_CHARS)
            if content != msg.content:
                logger.debug(
                    "Assistant message rewritten: %d -> %d chars",
                    len(msg.content),
                    len(content),
                )
            out.append(Message(role=msg.role, content=content))
        else:
            out.append(msg)
    return out
