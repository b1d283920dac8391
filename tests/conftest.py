"""
Pytest configuration and shared fixtures for Course Quiz Generator tests.

This module provides reusable fixtures for models, file-backed stores,
a fixed clock and a mocked Gemini client.
"""
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List
from unittest.mock import MagicMock, Mock

import pytest

from src.course_quiz_generator.models.question_models import (
    ConceptualQuestion,
    FinalQuestion,
    McqQuestion,
    ShortAnswerQuestion,
)
from src.course_quiz_generator.models.quiz_models import FormattedQuestion, Quiz
from src.course_quiz_generator.storage.json_store import (
    JsonAttemptStore,
    JsonCourseRegistry,
    JsonQuizStore,
)


# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")


# ============================================================================
# ENVIRONMENT FIXTURES
# ============================================================================

@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock environment variables for testing."""
    test_api_key = "test-gemini-api-key-12345"
    monkeypatch.setenv("GEMINI_API_KEY", test_api_key)
    return {"GEMINI_API_KEY": test_api_key}


@pytest.fixture
def clean_env(monkeypatch):
    """Clean environment with no API key set."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)


# ============================================================================
# FILE SYSTEM FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def long_text() -> str:
    """Course text comfortably above the minimum extraction length."""
    return (
        "Photosynthesis is the process by which green plants convert light energy "
        "into chemical energy stored in glucose.\n\n"
        "The light-dependent reactions take place in the thylakoid membranes and "
        "produce ATP and NADPH for the Calvin cycle."
    )


@pytest.fixture
def course_files_dir(temp_dir, long_text):
    """Create a files directory with one course holding three text materials."""
    course_dir = temp_dir / "files" / "course-101"
    course_dir.mkdir(parents=True)
    (course_dir / "week1.txt").write_text(long_text)
    (course_dir / "week2.txt").write_text(long_text.replace("Photosynthesis", "Respiration"))
    (course_dir / "week3.txt").write_text(long_text.replace("green plants", "algae"))
    return temp_dir / "files"


# ============================================================================
# MODEL FIXTURES - Questions
# ============================================================================

@pytest.fixture
def sample_mcq() -> McqQuestion:
    """Create a well-formed multiple-choice question."""
    return McqQuestion(
        question="Which organelle is the main site of photosynthesis in plant cells?",
        options={
            "A": "The mitochondrion",
            "B": "The chloroplast",
            "C": "The ribosome",
            "D": "The cell nucleus",
        },
        correct_answer="B",
        chunk_id=1,
        source="week1.txt"
    )


@pytest.fixture
def sample_short_answer() -> ShortAnswerQuestion:
    """Create a well-formed short-answer question."""
    return ShortAnswerQuestion(
        question="What two products of the light reactions feed the Calvin cycle?",
        expected_answer="ATP and NADPH",
        chunk_id=1,
        source="week1.txt"
    )


@pytest.fixture
def sample_conceptual() -> ConceptualQuestion:
    """Create a well-formed conceptual question."""
    return ConceptualQuestion(
        question="Explain how light energy ends up stored as chemical energy in glucose.",
        key_points="Light reactions make ATP/NADPH; Calvin cycle fixes carbon into sugar",
        chunk_id=1,
        source="week1.txt"
    )


MCQ_QUESTION_TEXTS = [
    "Which organelle is the main site of photosynthesis in plant cells?",
    "What molecule carries genetic information in most living organisms?",
    "Which process moves water across a semipermeable membrane?",
    "How many chromosomes does a typical human somatic cell contain?",
    "Which enzyme unwinds the DNA double helix during replication?",
    "What gas do animals exhale as a product of cellular respiration?",
    "Which blood cells are primarily responsible for fighting infection?",
    "Where in the cell does glycolysis take place?",
    "Which hormone lowers blood glucose levels after a meal?",
    "What is the basic functional unit of the kidney called?",
    "Which scientist proposed natural selection as a mechanism of evolution?",
    "What type of bond holds the two strands of DNA together?",
    "Which part of the brain coordinates balance and fine movement?",
    "What pigment gives plants their green colour?",
    "Which level of ecological organisation includes all populations in an area?",
    "What is the name for an organism that makes its own food?",
    "Which vitamin is produced in human skin exposed to sunlight?",
    "What structure controls which substances enter and leave a cell?",
    "Which stage of mitosis lines chromosomes up at the cell equator?",
    "How do vaccines prepare the immune system for future infections?",
]


def make_mcq(index: int, correct: str = "A") -> McqQuestion:
    """Build a distinct, high-quality MCQ (index 0-19)."""
    return McqQuestion(
        question=MCQ_QUESTION_TEXTS[index],
        options={
            "A": "The first listed option",
            "B": "The second listed option",
            "C": "The third listed option",
            "D": "The fourth listed option",
        },
        correct_answer=correct,
        chunk_id=1,
        source="week1.txt"
    )


@pytest.fixture
def mcq_factory():
    """Factory for distinct high-quality MCQs."""
    return make_mcq


SHORT_QUESTION_TEXTS = [
    "Name the process by which plants lose water through their leaves.",
    "State the main function of red blood cells in the body.",
    "Define the term homeostasis in one sentence.",
    "Give one example of a decomposer found in soil.",
    "Identify the monomer that makes up proteins.",
    "Describe where bile is produced in the human body.",
    "List the products of anaerobic respiration in yeast.",
    "Explain briefly what an allele is.",
    "Outline the role of stomata in gas exchange.",
    "Suggest why enzymes stop working at very high temperatures.",
    "Recall the name of the molecule that stores energy in cells.",
    "Write the word equation for aerobic respiration.",
]

CONCEPTUAL_QUESTION_TEXTS = [
    "Discuss how natural selection can lead to antibiotic resistance in bacteria.",
    "Compare the advantages of sexual and asexual reproduction for a species.",
    "Evaluate the impact of deforestation on the global carbon cycle.",
    "Analyse why the surface area to volume ratio limits cell size.",
    "Justify the use of controlled variables in a biology experiment.",
    "Assess the ethical concerns raised by genetic engineering of crops.",
]


@pytest.fixture
def short_question_texts() -> List[str]:
    return list(SHORT_QUESTION_TEXTS)


@pytest.fixture
def full_candidates():
    """Distinct, well-formed candidates: 20 MCQs, 12 short answers, 6 conceptual."""
    return (
        [make_mcq(i, correct="C") for i in range(20)]
        + [ShortAnswerQuestion(question=t, expected_answer="A sufficiently detailed answer")
           for t in SHORT_QUESTION_TEXTS]
        + [ConceptualQuestion(question=t, key_points="Key points covering the main argument")
           for t in CONCEPTUAL_QUESTION_TEXTS]
    )


@pytest.fixture
def sample_final_questions(sample_mcq, sample_short_answer) -> List[FinalQuestion]:
    """Two final questions: one MCQ worth 1 point and one short answer worth 2."""
    return [
        FinalQuestion(question=sample_mcq, quality_score=1.0, question_number=1, points=1),
        FinalQuestion(question=sample_short_answer, quality_score=0.8, question_number=2, points=2),
    ]


# ============================================================================
# MODEL FIXTURES - Quiz
# ============================================================================

@pytest.fixture
def sample_quiz() -> Quiz:
    """A three-question quiz worth 1, 2 and 3 marks (6 in total)."""
    questions = [
        FormattedQuestion(
            question_id=i,
            question=f"Question number {i}?",
            options=["Option A", "Option B", "Option C", "Option D"],
            correct_answer=i - 1,
            marks=i
        )
        for i in range(1, 4)
    ]
    return Quiz(
        quiz_id="quiz-1",
        course_id="course-101",
        week_number=0,
        title="Course Completion Quiz",
        topic="Comprehensive Assessment",
        description="Test quiz",
        time_limit=45,
        total_marks=6,
        total_questions=3,
        questions=questions,
        status="Active",
        ai_generated=True,
        created_by="AI_System",
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc)
    )


# ============================================================================
# STORE FIXTURES
# ============================================================================

@pytest.fixture
def quiz_store(temp_dir) -> JsonQuizStore:
    return JsonQuizStore(str(temp_dir / "output" / "quizzes.json"))


@pytest.fixture
def attempt_store(temp_dir) -> JsonAttemptStore:
    return JsonAttemptStore(str(temp_dir / "output" / "attempts.json"))


@pytest.fixture
def course_registry(temp_dir) -> JsonCourseRegistry:
    registry = JsonCourseRegistry(str(temp_dir / "output" / "courses.json"))
    registry.set_course_status("course-101", "Completed")
    return registry


# ============================================================================
# CLOCK FIXTURES
# ============================================================================

class FixedClock:
    """Mutable clock for time-dependent policy tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc))


# ============================================================================
# MOCK GOOGLE AI API FIXTURES
# ============================================================================

@pytest.fixture
def sample_reply_text() -> str:
    """A model reply in the expected line format."""
    return """MCQ:
Q1: Which organelle is the main site of photosynthesis in plant cells?
A) The mitochondrion
B) The chloroplast
C) The ribosome
D) The cell nucleus
CORRECT: B

Q2: Where do the light-dependent reactions take place?
A) In the stroma
B) In the thylakoid membranes
C) In the cytoplasm
D) In the cell wall
CORRECT: B

SHORT:
Q1: What two products of the light reactions feed the Calvin cycle?
ANSWER: ATP and NADPH

CONCEPTUAL:
Q1: Explain how light energy ends up stored as chemical energy.
ANSWER: Light reactions make ATP and NADPH which the Calvin cycle uses to fix carbon
"""


@pytest.fixture
def mock_genai_client():
    """Create a mock Google GenAI client."""
    client = MagicMock()
    client.models = MagicMock()
    client.models.generate_content = MagicMock()
    return client


@pytest.fixture
def mock_generate_response(sample_reply_text):
    """Create a mock API response for question generation."""
    mock_response = Mock()
    mock_response.text = sample_reply_text
    return mock_response
