from .distribution import clamp_count, distribute_types, parse_types
from .errors import (
    EmptyResult,
    InvalidRequest,
    MalformedJson,
    NoArrayFound,
    QuizError,
    SessionStateError,
    TransportError,
)
from .export import render_html, render_markdown, summary_text, write_report
from .generator import (
    ChatQuizGenerator,
    GenerationRequest,
    build_quiz_prompt,
    generate_quiz,
)
from .grading import fuzzy_match, grade_attempt, is_correct
from .models import (
    Attempt,
    GradeReport,
    Question,
    QuestionSet,
    QuestionType,
    QuestionVerdict,
)
from .parser import extract_json_array, strip_code_fences
from .session import QuizMode, QuizSession, SessionState
from .timer import Countdown, format_clock
from .validator import normalize_question, validate_questions
from .view import parse_session_command, render_report, run_quiz_session

__all__ = [
    "clamp_count",
    "distribute_types",
    "parse_types",
    "EmptyResult",
    "InvalidRequest",
    "MalformedJson",
    "NoArrayFound",
    "QuizError",
    "SessionStateError",
    "TransportError",
    "render_html",
    "render_markdown",
    "summary_text",
    "write_report",
    "ChatQuizGenerator",
    "GenerationRequest",
    "build_quiz_prompt",
    "generate_quiz",
    "fuzzy_match",
    "grade_attempt",
    "is_correct",
    "Attempt",
    "GradeReport",
    "Question",
    "QuestionSet",
    "QuestionType",
    "QuestionVerdict",
    "extract_json_array",
    "strip_code_fences",
    "QuizMode",
    "QuizSession",
    "SessionState",
    "Countdown",
    "format_clock",
    "normalize_question",
    "validate_questions",
    "parse_session_command",
    "render_report",
    "run_quiz_session",
]
