"""
Attempt Governor.

Decides whether a student may attempt a course's final quiz, records and
scores attempts, and manages the rolling block after too many failures.

Eligibility is a pure function of the completed-attempt history and the
course status. It is recomputed on every call and never stored.
"""
import threading
import uuid
import weakref
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Tuple

from src.course_quiz_generator.exceptions import IneligibleError, QuizNotFoundError
from src.course_quiz_generator.models.attempt_models import (
    Attempt,
    AttemptHistory,
    AttemptResult,
    AttemptSummary,
    BlockStatus,
    EligibilityState,
    ResetResult,
)
from src.course_quiz_generator.models.quiz_models import FormattedQuestion
from src.course_quiz_generator.storage.interfaces import (
    AttemptStore,
    CourseStatusLookup,
    QuizStore,
)
from src.course_quiz_generator import config

ALREADY_PASSED_REASON = "Already passed"
COURSE_NOT_READY_REASON = (
    "This course is not yet ready for quizzes. "
    "Please wait for the instructor to finalize the course."
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AttemptGovernor:
    """Eligibility, scoring and block policy for quiz attempts."""

    def __init__(
        self,
        quiz_store: QuizStore,
        attempt_store: AttemptStore,
        course_status_lookup: CourseStatusLookup,
        max_attempts: Optional[int] = None,
        block_duration_days: Optional[int] = None,
        passing_percentage: Optional[int] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the governor.

        Args:
            quiz_store: Source of quiz documents
            attempt_store: Append-only attempt history
            course_status_lookup: Reports whether a course is ready for assessment
            max_attempts: Attempts allowed before blocking (config.MAX_ATTEMPTS)
            block_duration_days: Length of the temporary block (config.BLOCK_DURATION_DAYS)
            passing_percentage: Percentage needed to pass (config.PASSING_PERCENTAGE)
            clock: Returns the current UTC time; injectable for tests
        """
        self.quiz_store = quiz_store
        self.attempt_store = attempt_store
        self.course_status_lookup = course_status_lookup
        self.max_attempts = max_attempts or config.MAX_ATTEMPTS
        self.block_duration_days = block_duration_days or config.BLOCK_DURATION_DAYS
        self.passing_percentage = passing_percentage or config.PASSING_PERCENTAGE
        self.clock = clock or _utc_now

        self._locks_guard = threading.Lock()
        # An entry lives only while some caller still holds its lock
        self._attempt_locks = weakref.WeakValueDictionary()

    def _attempt_lock(self, student_id: str, quiz_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._attempt_locks.setdefault((student_id, quiz_id), threading.Lock())

    def _now(self) -> datetime:
        return _as_utc(self.clock())

    def get_student_attempts(self, student_id: str, quiz_id: str) -> List[Attempt]:
        """Completed attempts, newest first."""
        return self.attempt_store.list_attempts(student_id, quiz_id, status="Completed")

    def _block_expiry(self, attempts: List[Attempt]) -> datetime:
        return _as_utc(attempts[0].submitted_at) + timedelta(days=self.block_duration_days)

    def check_attempt_eligibility(
        self,
        student_id: str,
        course_id: Optional[str],
        quiz_id: str
    ) -> EligibilityState:
        """
        Recompute whether the student may attempt the quiz now.

        Args:
            student_id: Student
            course_id: Owning course; None skips the course readiness check
            quiz_id: Quiz

        Returns:
            EligibilityState
        """
        attempts = self.get_student_attempts(student_id, quiz_id)
        eligibility = EligibilityState(
            total_attempts=len(attempts),
            best_score=max((a.percentage for a in attempts), default=0)
        )

        if any(a.percentage >= self.passing_percentage for a in attempts):
            eligibility.is_passed = True
            eligibility.block_reason = ALREADY_PASSED_REASON
            return eligibility

        if len(attempts) >= self.max_attempts:
            block_expiry = self._block_expiry(attempts)
            eligibility.is_blocked = True
            if self._now() < block_expiry:
                eligibility.block_reason = f"Maximum attempts ({self.max_attempts}) reached"
                eligibility.block_expires_at = block_expiry
            else:
                eligibility.block_reason = (
                    f"Permanently blocked after {self.max_attempts} failed attempts")
            return eligibility

        eligibility.remaining_attempts = self.max_attempts - len(attempts)

        if course_id is not None:
            status = self.course_status_lookup.get_course_status(str(course_id))
            if status != config.COURSE_READY_STATUS:
                eligibility.block_reason = COURSE_NOT_READY_REASON
                return eligibility

        eligibility.can_attempt = True
        return eligibility

    def evaluate_answers(
        self,
        answers: Dict[int, int],
        questions: List[FormattedQuestion]
    ) -> Tuple[int, int, int]:
        """
        Score answers by exact match against each question's correct option.

        Returns:
            (score, total_marks, percentage) with percentage rounded half up
        """
        normalized = {int(k): v for k, v in (answers or {}).items() if v is not None}
        total_marks = sum(q.marks for q in questions)
        score = sum(
            q.marks for q in questions
            if normalized.get(q.question_id) is not None
            and int(normalized[q.question_id]) == q.correct_answer
        )
        percentage = (score * 200 + total_marks) // (2 * total_marks) if total_marks > 0 else 0
        return score, total_marks, percentage

    def record_attempt(
        self,
        student_id: str,
        course_id: str,
        quiz_id: str,
        answers: Dict[int, int],
        time_spent: int = 0
    ) -> AttemptResult:
        """
        Validate eligibility, score and persist one attempt.

        Args:
            student_id: Student
            course_id: Owning course
            quiz_id: Quiz being attempted
            answers: question_id -> selected option index
            time_spent: Seconds spent on the attempt

        Returns:
            AttemptResult with post-submission eligibility

        Raises:
            IneligibleError: If the student may not attempt the quiz
            QuizNotFoundError: If the quiz does not exist
        """
        with self._attempt_lock(student_id, quiz_id):
            eligibility = self.check_attempt_eligibility(student_id, course_id, quiz_id)
            if not eligibility.can_attempt:
                raise IneligibleError(eligibility.block_reason, eligibility.block_expires_at)

            quiz = self.quiz_store.get(quiz_id)
            if quiz is None:
                raise QuizNotFoundError(quiz_id)

            score, total_marks, percentage = self.evaluate_answers(answers, quiz.questions)

            attempt = self.attempt_store.add(Attempt(
                attempt_id=uuid.uuid4().hex,
                quiz_id=quiz_id,
                student_id=student_id,
                course_id=str(course_id) if course_id is not None else None,
                week_number=quiz.week_number,
                answers={int(k): v for k, v in (answers or {}).items() if v is not None},
                score=score,
                total_marks=total_marks,
                percentage=percentage,
                status="Completed",
                submitted_at=self._now(),
                time_spent=time_spent
            ))

            updated = self.check_attempt_eligibility(student_id, course_id, quiz_id)

        return AttemptResult(
            attempt_id=attempt.attempt_id,
            score=score,
            total_marks=total_marks,
            percentage=percentage,
            is_passed=percentage >= self.passing_percentage,
            remaining_attempts=updated.remaining_attempts,
            is_blocked=updated.is_blocked,
            block_reason=updated.block_reason,
            block_expires_at=updated.block_expires_at
        )

    def get_attempt_history(self, student_id: str, quiz_id: str) -> AttemptHistory:
        """All attempts newest first, with current eligibility (course check skipped)."""
        attempts = self.attempt_store.list_attempts(student_id, quiz_id)
        return AttemptHistory(
            attempts=[
                AttemptSummary(
                    attempt_id=a.attempt_id,
                    score=a.score,
                    total_marks=a.total_marks,
                    percentage=a.percentage,
                    submitted_at=a.submitted_at,
                    is_passed=a.percentage >= self.passing_percentage
                )
                for a in attempts
            ],
            eligibility=self.check_attempt_eligibility(student_id, None, quiz_id)
        )

    def get_block_status(self, student_id: str, quiz_id: str) -> BlockStatus:
        eligibility = self.check_attempt_eligibility(student_id, None, quiz_id)
        return BlockStatus(
            is_blocked=eligibility.is_blocked,
            block_reason=eligibility.block_reason,
            block_expires_at=eligibility.block_expires_at,
            can_attempt=eligibility.can_attempt,
            remaining_attempts=eligibility.remaining_attempts,
            total_attempts=eligibility.total_attempts
        )

    def reset_block_for_student(self, student_id: str, quiz_id: str) -> ResetResult:
        """
        Purge a student's attempt history once the block window has elapsed.

        Nothing is deleted while the block is still running or when the
        student has not reached the attempt limit.
        """
        with self._attempt_lock(student_id, quiz_id):
            attempts = self.get_student_attempts(student_id, quiz_id)
            if len(attempts) >= self.max_attempts and self._now() >= self._block_expiry(attempts):
                deleted = self.attempt_store.delete_attempts(student_id, quiz_id)
                print(f"✓ Reset block for student {student_id} on quiz {quiz_id} "
                      f"({deleted} attempts removed)")
                return ResetResult(
                    success=True,
                    message=f"Block reset after {self.block_duration_days}-day period"
                )

        return ResetResult(success=False, message="No eligible block to reset")
