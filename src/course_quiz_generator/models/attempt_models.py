"""
Pydantic models for quiz attempts and derived eligibility.
"""
from datetime import datetime
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field


class Attempt(BaseModel):
    """One submitted quiz attempt. Append-only."""
    attempt_id: str
    quiz_id: str
    student_id: str
    course_id: Optional[str] = None
    week_number: int = 0
    answers: Dict[int, int] = Field(
        default_factory=dict,
        description="Mapping of question_id to selected option index")
    score: int
    total_marks: int
    percentage: int = Field(ge=0, le=100)
    status: Literal["InProgress", "Completed"] = "Completed"
    submitted_at: datetime
    time_spent: int = 0


class EligibilityState(BaseModel):
    """Whether a student may attempt a quiz right now, and why not."""
    can_attempt: bool = False
    remaining_attempts: int = 0
    total_attempts: int = 0
    is_blocked: bool = False
    block_reason: Optional[str] = None
    block_expires_at: Optional[datetime] = None
    is_passed: bool = False
    best_score: int = 0


class AttemptResult(BaseModel):
    """Outcome of recording an attempt, with post-submission eligibility."""
    attempt_id: str
    score: int
    total_marks: int
    percentage: int
    is_passed: bool
    remaining_attempts: int
    is_blocked: bool
    block_reason: Optional[str] = None
    block_expires_at: Optional[datetime] = None


class AttemptSummary(BaseModel):
    attempt_id: str
    score: int
    total_marks: int
    percentage: int
    submitted_at: datetime
    is_passed: bool


class AttemptHistory(BaseModel):
    attempts: List[AttemptSummary]
    eligibility: EligibilityState


class BlockStatus(BaseModel):
    is_blocked: bool
    block_reason: Optional[str] = None
    block_expires_at: Optional[datetime] = None
    can_attempt: bool
    remaining_attempts: int
    total_attempts: int


class ResetResult(BaseModel):
    success: bool
    message: str
