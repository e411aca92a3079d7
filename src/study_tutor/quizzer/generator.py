"""Quiz generation: prompt construction, the chat call, and the pipeline.

``generate_quiz`` is the one entry point callers need. It validates the
request, computes the type distribution, asks a :class:`QuizGenerator` for
raw text, and turns that text into a :class:`QuestionSet`. Any failure
aborts the whole attempt with a :class:`QuizError`; nothing partial escapes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, Sequence, Union

from study_tutor.core.ai import ChatCompletionError, chat_completion_content

from .distribution import clamp_count, distribute_types, parse_types
from .errors import InvalidRequest, TransportError
from .models import QuestionSet, QuestionType
from .parser import extract_json_array
from .validator import validate_questions

DEFAULT_MODEL = "google/gemma-2-9b-it"
MAX_CONTENT_CHARS = 2500
TOKENS_PER_QUESTION = 150
BASE_TOKENS = 300
MAX_TOKENS = 4000

DIFFICULTY_DESCRIPTIONS = {
    "easy": "simple, straightforward concepts",
    "medium": "standard difficulty with moderate depth",
    "hard": "complex concepts requiring deep understanding",
}


@dataclass(frozen=True)
class GenerationRequest:
    """Everything the generation collaborator needs for one call."""

    content: str
    distribution: Mapping[QuestionType, int]
    difficulty: str

    @property
    def count(self) -> int:
        return sum(self.distribution.values())


class QuizGenerator(Protocol):
    """Produces raw model text for a request or raises TransportError."""

    def generate(self, request: GenerationRequest) -> str: ...


def truncate_content(content: str, limit: int = MAX_CONTENT_CHARS) -> str:
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


def max_tokens_for(count: int) -> int:
    return min(MAX_TOKENS, BASE_TOKENS + count * TOKENS_PER_QUESTION)


def build_quiz_prompt(request: GenerationRequest) -> str:
    """Render the instruction prompt asking for a bare JSON array."""
    breakdown = "\n".join(
        f"- {num} {qtype.value.upper()} questions"
        for qtype, num in request.distribution.items()
    )
    level = DIFFICULTY_DESCRIPTIONS[request.difficulty]
    return (
        f"Create {request.count} quiz questions ({level}) from this content.\n"
        "\n"
        "Question type distribution:\n"
        f"{breakdown}\n"
        "\n"
        "Return ONLY this JSON format with NO extra text:\n"
        "[\n"
        "  {\n"
        '    "type": "mcq" | "fillblank" | "truefalse",\n'
        '    "question": "Question text?",\n'
        '    "options": ["A", "B", "C", "D"] (for mcq/truefalse only),\n'
        '    "correctIndex": 0 (for mcq/truefalse),\n'
        '    "correctAnswer": "answer text" (for fillblank only),\n'
        '    "hint": "Brief hint",\n'
        '    "explanation": "Why this is correct"\n'
        "  }\n"
        "]\n"
        "\n"
        'For TRUE/FALSE questions: options should be ["True", "False"]\n'
        'For FILL IN THE BLANK: omit "options" and "correctIndex", provide '
        '"correctAnswer" instead\n'
        "\n"
        "Content:\n"
        f"{truncate_content(request.content)}"
    )


class ChatQuizGenerator:
    """QuizGenerator backed by an OpenAI-compatible chat client."""

    def __init__(
        self,
        client: Any,
        *,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        top_p: Optional[float] = 0.9,
    ) -> None:
        self.client = client
        self.model = model
        self.temperature = temperature
        self.top_p = top_p

    def generate(self, request: GenerationRequest) -> str:
        try:
            return chat_completion_content(
                self.client,
                model=self.model,
                prompt=build_quiz_prompt(request),
                max_tokens=max_tokens_for(request.count),
                temperature=self.temperature,
                top_p=self.top_p,
            )
        except ChatCompletionError as exc:
            raise TransportError(str(exc), cause=exc) from exc


def generate_quiz(
    content: str,
    *,
    generator: QuizGenerator,
    count: object = 10,
    difficulty: str = "medium",
    types: Union[str, Sequence[Union[str, QuestionType]]] = (
        "mcq,fillblank,truefalse"
    ),
    logger: Optional[logging.Logger] = None,
) -> QuestionSet:
    """Run the full pipeline and return a validated question set."""
    log = logger or logging.getLogger(__name__)
    text = (content or "").strip()
    if not text:
        raise InvalidRequest("No content provided")
    level = (difficulty or "").strip().lower()
    if level not in DIFFICULTY_DESCRIPTIONS:
        known = ", ".join(DIFFICULTY_DESCRIPTIONS)
        raise InvalidRequest(
            f"Unknown difficulty '{difficulty}'. Expected one of: {known}"
        )

    requested = clamp_count(count)
    distribution = distribute_types(requested, parse_types(types))
    request = GenerationRequest(
        content=text, distribution=distribution, difficulty=level
    )
    log.info(
        "Requesting quiz generation",
        extra={
            "count": requested,
            "difficulty": level,
            "distribution": {t.value: n for t, n in distribution.items()},
            "content_chars": len(text),
        },
    )

    raw = generator.generate(request)
    log.debug("Received generation response", extra={"chars": len(raw)})
    records = extract_json_array(raw)
    return validate_questions(records, requested, logger=log)
