"""
Core pipeline services and the attempt governor.
"""

from src.course_quiz_generator.core.extraction import TextExtractionService
from src.course_quiz_generator.core.chunking import ChunkingService
from src.course_quiz_generator.core.generator import QuestionGenerationClient
from src.course_quiz_generator.core.consolidation import QuizConsolidationService
from src.course_quiz_generator.core.orchestrator import QuizOrchestrator
from src.course_quiz_generator.core.governor import AttemptGovernor

__all__ = [
    "TextExtractionService",
    "ChunkingService",
    "QuestionGenerationClient",
    "QuizConsolidationService",
    "QuizOrchestrator",
    "AttemptGovernor",
]
