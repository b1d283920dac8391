"""
Pydantic models for the persisted quiz document.
"""
from datetime import datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from src.course_quiz_generator.models.question_models import FinalQuestion


class FormattedQuestion(BaseModel):
    """A gradable multiple-choice question as stored on the quiz."""
    question_id: int = Field(ge=1, description="1-based sequential identifier")
    question: str = Field(description="The question text")
    options: List[str] = Field(
        min_length=4,
        max_length=4,
        description="Options in A-D order"
    )
    correct_answer: int = Field(
        ge=0, le=3, description="Zero-based index of the correct option")
    marks: int = Field(ge=0)
    difficulty: str = "Medium"
    explanation: str = ""


class Quiz(BaseModel):
    """Final AI-generated quiz for a course."""
    quiz_id: str
    course_id: str
    week_number: int = 0
    title: str
    topic: str
    description: str
    time_limit: int = Field(description="Time limit in minutes")
    total_marks: int
    total_questions: int
    questions: List[FormattedQuestion]
    review_questions: List[FinalQuestion] = Field(
        default_factory=list,
        description="Short-answer and conceptual questions kept for manual review"
    )
    status: Literal["Active", "Inactive"] = "Active"
    ai_generated: bool = True
    created_by: str
    created_at: datetime


class QuizGenerationResult(BaseModel):
    """Result returned by a quiz generation run."""
    success: bool
    quiz_id: Optional[str] = None
    total_questions: Optional[int] = None
    total_marks: Optional[int] = None
    message: str
