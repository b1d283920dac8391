"""
Pydantic models for generated quiz questions.

Candidate questions are a discriminated union on ``type`` so that
type-specific fields (options, expected answer, key points) only exist on
the matching variant.
"""
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

QuestionType = Literal["mcq", "short_answer", "conceptual"]
OptionLetter = Literal["A", "B", "C", "D"]

OPTION_LETTERS: List[str] = ["A", "B", "C", "D"]
QUESTION_TYPES: List[str] = ["mcq", "short_answer", "conceptual"]


class BaseQuestion(BaseModel):
    """Fields shared by every generated question."""
    question: str = Field(description="The question text")
    chunk_id: Optional[int] = Field(
        default=None,
        description="ID of the chunk the question was generated from")
    source: str = Field(
        default="unknown",
        description="Title of the source material")


class McqQuestion(BaseQuestion):
    """Multiple-choice question with four lettered options."""
    type: Literal["mcq"] = "mcq"
    options: Dict[OptionLetter, str] = Field(
        description="Mapping of option letter (A-D) to option text")
    correct_answer: str = Field(
        description="Letter of the correct option")


class ShortAnswerQuestion(BaseQuestion):
    """Short free-text answer question."""
    type: Literal["short_answer"] = "short_answer"
    expected_answer: str = Field(description="Expected answer text")


class ConceptualQuestion(BaseQuestion):
    """Open conceptual question graded against key points."""
    type: Literal["conceptual"] = "conceptual"
    key_points: str = Field(description="Key points of a good answer")


CandidateQuestion = Annotated[
    Union[McqQuestion, ShortAnswerQuestion, ConceptualQuestion],
    Field(discriminator="type"),
]


class ScoredQuestion(BaseModel):
    """A candidate question with its heuristic quality score."""
    question: CandidateQuestion
    quality_score: float = Field(ge=0.0, le=1.0)

    @property
    def type(self) -> str:
        return self.question.type


class FinalQuestion(ScoredQuestion):
    """A selected question with its position and point value."""
    question_number: int = Field(ge=1, description="1-based position in the quiz")
    points: int = Field(ge=0, description="Marks awarded for this question")
