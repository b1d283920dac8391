"""
Course Quiz Generator.

Turns a course's materials into a vetted, fixed-size AI-generated final
quiz and governs how students may attempt it.
"""

__version__ = "1.0.0"
__author__ = "Course Quiz Generator Development Team"

from src.course_quiz_generator.core.orchestrator import QuizOrchestrator
from src.course_quiz_generator.core.governor import AttemptGovernor

__all__ = [
    "QuizOrchestrator",
    "AttemptGovernor",
]
