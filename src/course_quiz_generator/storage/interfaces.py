"""
Collaborator interfaces consumed by the orchestrator and attempt governor.
"""
from typing import List, Optional, Protocol

from src.course_quiz_generator.models.attempt_models import Attempt
from src.course_quiz_generator.models.material_models import Material
from src.course_quiz_generator.models.quiz_models import Quiz


class MaterialLocator(Protocol):
    def list_materials(self, course_id: str) -> List[Material]:
        """Return every material record for a course, including assignments."""


class BlobFetcher(Protocol):
    def fetch_to_local_file(self, file_ref: str) -> str:
        """Download a blob reference to a local temporary file and return its path."""

    def delete_local_file(self, local_path: str) -> None:
        """Remove a file previously returned by fetch_to_local_file."""


class CourseStatusLookup(Protocol):
    def get_course_status(self, course_id: str) -> Optional[str]:
        """Return the course status, e.g. "Completed", or None if unknown."""


class QuizStore(Protocol):
    def find_active_ai_quiz(self, course_id: str, week_number: int = 0) -> Optional[Quiz]:
        ...

    def get(self, quiz_id: str) -> Optional[Quiz]:
        ...

    def save(self, quiz: Quiz) -> Quiz:
        ...


class AttemptStore(Protocol):
    def list_attempts(
        self,
        student_id: str,
        quiz_id: str,
        status: Optional[str] = None
    ) -> List[Attempt]:
        """Return attempts newest first, optionally filtered by status."""

    def add(self, attempt: Attempt) -> Attempt:
        ...

    def delete_attempts(self, student_id: str, quiz_id: str) -> int:
        """Delete every attempt for a student on a quiz and return the count."""
