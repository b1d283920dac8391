"""
Unit tests for quiz, material and attempt models.
"""
import pytest
from datetime import datetime, timezone
from pydantic import ValidationError

from src.course_quiz_generator.models.attempt_models import Attempt, EligibilityState
from src.course_quiz_generator.models.material_models import Chunk, Material
from src.course_quiz_generator.models.quiz_models import FormattedQuestion, Quiz


@pytest.mark.unit
class TestFormattedQuestion:
    """Test the gradable question shape."""

    def test_requires_exactly_four_options(self):
        with pytest.raises(ValidationError):
            FormattedQuestion(
                question_id=1, question="Q?", options=["a", "b", "c"],
                correct_answer=0, marks=1
            )

    def test_correct_answer_is_an_index(self):
        with pytest.raises(ValidationError):
            FormattedQuestion(
                question_id=1, question="Q?", options=["a", "b", "c", "d"],
                correct_answer=4, marks=1
            )

    def test_defaults(self):
        question = FormattedQuestion(
            question_id=1, question="Q?", options=["a", "b", "c", "d"],
            correct_answer=2, marks=1
        )

        assert question.difficulty == "Medium"
        assert question.explanation == ""


@pytest.mark.unit
class TestQuiz:
    """Test the persisted quiz document."""

    def test_quiz_json_round_trip(self, sample_quiz):
        restored = Quiz.model_validate_json(sample_quiz.model_dump_json())

        assert restored == sample_quiz
        assert restored.created_at.tzinfo is not None

    def test_status_is_constrained(self, sample_quiz):
        data = sample_quiz.model_dump()
        data["status"] = "Archived"

        with pytest.raises(ValidationError):
            Quiz.model_validate(data)

    def test_review_questions_default_empty(self, sample_quiz):
        assert sample_quiz.review_questions == []


@pytest.mark.unit
class TestMaterialModels:
    """Test material and chunk models."""

    def test_material_file_ref_optional(self):
        material = Material(material_id="m1", title="Video", content_type="video")

        assert material.file_ref is None

    def test_chunk_id_starts_at_one(self):
        with pytest.raises(ValidationError):
            Chunk(chunk_id=0, text="x", word_count=1)


@pytest.mark.unit
class TestAttemptModels:
    """Test attempt and eligibility models."""

    def test_percentage_bounds(self):
        with pytest.raises(ValidationError):
            Attempt(
                attempt_id="a1", quiz_id="q1", student_id="s1",
                score=5, total_marks=4, percentage=125,
                submitted_at=datetime(2025, 1, 1, tzinfo=timezone.utc)
            )

    def test_answers_keys_coerced_from_json(self):
        attempt = Attempt.model_validate({
            "attempt_id": "a1", "quiz_id": "q1", "student_id": "s1",
            "answers": {"1": 2, "3": 0},
            "score": 1, "total_marks": 2, "percentage": 50,
            "submitted_at": "2025-01-01T00:00:00+00:00"
        })

        assert attempt.answers == {1: 2, 3: 0}
        assert attempt.status == "Completed"

    def test_eligibility_defaults_to_denied(self):
        state = EligibilityState()

        assert state.can_attempt is False
        assert state.is_blocked is False
        assert state.block_reason is None
