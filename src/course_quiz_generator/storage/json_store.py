"""
JSON file stores for quizzes, attempts and course status.

Each store keeps one JSON document on disk and rewrites it on every change.
Writes are serialized with a lock; multi-process deployments need a real
database instead.
"""
import json
import threading
from pathlib import Path
from typing import Any, List, Optional

from src.course_quiz_generator.models.attempt_models import Attempt
from src.course_quiz_generator.models.quiz_models import Quiz
from src.course_quiz_generator import config


class _JsonDocument:
    def __init__(self, path: Path, default: Any):
        self.path = Path(path)
        self.default = default
        self.lock = threading.RLock()

    def read(self) -> Any:
        if not self.path.is_file():
            return json.loads(json.dumps(self.default))
        with open(self.path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def write(self, data: Any) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)


class JsonQuizStore:
    """Quiz documents stored as a JSON list."""

    def __init__(self, path: Optional[str] = None):
        self._doc = _JsonDocument(
            Path(path) if path else Path(config.OUTPUT_DIR) / config.QUIZZES_FILE, [])

    def _all(self) -> List[Quiz]:
        return [Quiz.model_validate(item) for item in self._doc.read()]

    def find_active_ai_quiz(self, course_id: str, week_number: int = 0) -> Optional[Quiz]:
        with self._doc.lock:
            for quiz in self._all():
                if (quiz.course_id == str(course_id) and quiz.week_number == week_number
                        and quiz.ai_generated and quiz.status == "Active"):
                    return quiz
        return None

    def get(self, quiz_id: str) -> Optional[Quiz]:
        with self._doc.lock:
            for quiz in self._all():
                if quiz.quiz_id == quiz_id:
                    return quiz
        return None

    def save(self, quiz: Quiz) -> Quiz:
        with self._doc.lock:
            items = [q for q in self._doc.read() if q.get("quiz_id") != quiz.quiz_id]
            items.append(quiz.model_dump(mode="json"))
            self._doc.write(items)
        return quiz


class JsonAttemptStore:
    """Quiz attempts stored as a JSON list."""

    def __init__(self, path: Optional[str] = None):
        self._doc = _JsonDocument(
            Path(path) if path else Path(config.OUTPUT_DIR) / config.ATTEMPTS_FILE, [])

    def list_attempts(
        self,
        student_id: str,
        quiz_id: str,
        status: Optional[str] = None
    ) -> List[Attempt]:
        with self._doc.lock:
            attempts = [Attempt.model_validate(item) for item in self._doc.read()]
        matching = [
            a for a in attempts
            if a.student_id == student_id and a.quiz_id == quiz_id
            and (status is None or a.status == status)
        ]
        return sorted(matching, key=lambda a: a.submitted_at, reverse=True)

    def add(self, attempt: Attempt) -> Attempt:
        with self._doc.lock:
            items = self._doc.read()
            items.append(attempt.model_dump(mode="json"))
            self._doc.write(items)
        return attempt

    def delete_attempts(self, student_id: str, quiz_id: str) -> int:
        with self._doc.lock:
            items = self._doc.read()
            kept = [i for i in items
                    if not (i.get("student_id") == student_id and i.get("quiz_id") == quiz_id)]
            self._doc.write(kept)
        return len(items) - len(kept)


class JsonCourseRegistry:
    """Course statuses stored as a JSON object of course_id -> status."""

    def __init__(self, path: Optional[str] = None):
        self._doc = _JsonDocument(
            Path(path) if path else Path(config.OUTPUT_DIR) / config.COURSES_FILE, {})

    def get_course_status(self, course_id: str) -> Optional[str]:
        with self._doc.lock:
            entry = self._doc.read().get(str(course_id))
        if isinstance(entry, dict):
            return entry.get("status")
        return entry

    def set_course_status(self, course_id: str, status: str) -> None:
        with self._doc.lock:
            data = self._doc.read()
            data[str(course_id)] = {"status": status}
            self._doc.write(data)
