"""
Data models for quiz generation and attempt management.
"""

from src.course_quiz_generator.models.question_models import (
    McqQuestion,
    ShortAnswerQuestion,
    ConceptualQuestion,
    CandidateQuestion,
    ScoredQuestion,
    FinalQuestion,
)
from src.course_quiz_generator.models.material_models import (
    Material,
    ExtractedText,
    Chunk,
    ExtractionReport,
)
from src.course_quiz_generator.models.quiz_models import (
    FormattedQuestion,
    Quiz,
    QuizGenerationResult,
)
from src.course_quiz_generator.models.attempt_models import (
    Attempt,
    EligibilityState,
    AttemptResult,
    AttemptSummary,
    AttemptHistory,
    BlockStatus,
    ResetResult,
)

__all__ = [
    "McqQuestion",
    "ShortAnswerQuestion",
    "ConceptualQuestion",
    "CandidateQuestion",
    "ScoredQuestion",
    "FinalQuestion",
    "Material",
    "ExtractedText",
    "Chunk",
    "ExtractionReport",
    "FormattedQuestion",
    "Quiz",
    "QuizGenerationResult",
    "Attempt",
    "EligibilityState",
    "AttemptResult",
    "AttemptSummary",
    "AttemptHistory",
    "BlockStatus",
    "ResetResult",
]
