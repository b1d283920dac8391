"""
Course Quiz Orchestrator.

Runs the full assessment pipeline for one course:
fetch materials → extract → chunk → generate → consolidate → persist.

Features:
- Idempotent: an existing active AI-generated final quiz is returned as-is
- Per-course generation lock so concurrent calls in one process run once
- Per-material failure tolerance; only all-failed extraction is fatal
- Guaranteed cleanup of temporary blob downloads
- Quality floor on the final question count
"""
import argparse
import os
import threading
import uuid
import weakref
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from src.course_quiz_generator.core.chunking import ChunkingService
from src.course_quiz_generator.core.consolidation import QuizConsolidationService
from src.course_quiz_generator.core.extraction import TextExtractionService
from src.course_quiz_generator.core.generator import QuestionGenerationClient
from src.course_quiz_generator.exceptions import (
    AllExtractionsFailedError,
    ExtractionError,
    InsufficientQuestionsError,
    MaterialFileNotFoundError,
    NoMaterialsFoundError,
    QuizPipelineError,
)
from src.course_quiz_generator.models.material_models import ExtractedText, Material
from src.course_quiz_generator.models.question_models import FinalQuestion, OPTION_LETTERS
from src.course_quiz_generator.models.quiz_models import (
    FormattedQuestion,
    Quiz,
    QuizGenerationResult,
)
from src.course_quiz_generator.storage.interfaces import (
    BlobFetcher,
    MaterialLocator,
    QuizStore,
)
from src.course_quiz_generator.storage.materials import parse_blob_reference
from src.course_quiz_generator import config
from src.course_quiz_generator.utils.env_loader import load_env


class QuizOrchestrator:
    """Generate and persist the final AI quiz for a course."""

    def __init__(
        self,
        material_locator: MaterialLocator,
        quiz_store: QuizStore,
        blob_fetcher: Optional[BlobFetcher] = None,
        extraction_service: Optional[TextExtractionService] = None,
        chunking_service: Optional[ChunkingService] = None,
        generation_client: Optional[QuestionGenerationClient] = None,
        consolidation_service: Optional[QuizConsolidationService] = None,
        uploads_dir: Optional[str] = None,
        pacing_delay: Optional[float] = None,
        min_extracted_chars: Optional[int] = None,
        min_final_questions: Optional[int] = None
    ):
        """
        Initialize the orchestrator with its collaborators.

        Args:
            material_locator: Lists material records for a course
            quiz_store: Persists and looks up quizzes
            blob_fetcher: Downloads blob references; required only for blob materials
            extraction_service: Text extraction (default TextExtractionService())
            chunking_service: Chunking (default ChunkingService())
            generation_client: LLM client; built lazily on first pipeline run
            consolidation_service: Consolidation (default QuizConsolidationService())
            uploads_dir: Root for uploads-relative file references
            pacing_delay: Seconds between chunk generation calls
            min_extracted_chars: Minimum stripped text length for a usable material
            min_final_questions: Fewer final questions than this fails the run
        """
        self.material_locator = material_locator
        self.quiz_store = quiz_store
        self.blob_fetcher = blob_fetcher
        self.extraction_service = extraction_service or TextExtractionService()
        self.chunking_service = chunking_service or ChunkingService()
        self._generation_client = generation_client
        self.consolidation_service = consolidation_service or QuizConsolidationService()
        self.uploads_dir = Path(uploads_dir or config.UPLOADS_DIR)
        self.pacing_delay = config.CHUNK_PACING_SECONDS if pacing_delay is None else pacing_delay
        self.min_extracted_chars = (
            config.MIN_EXTRACTED_CHARS if min_extracted_chars is None else min_extracted_chars)
        self.min_final_questions = min_final_questions or config.MIN_FINAL_QUESTIONS

        self._locks_guard = threading.Lock()
        # An entry lives only while some caller still holds its lock
        self._course_locks = weakref.WeakValueDictionary()

    @property
    def generation_client(self) -> QuestionGenerationClient:
        if self._generation_client is None:
            self._generation_client = QuestionGenerationClient()
        return self._generation_client

    def _course_lock(self, course_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._course_locks.setdefault(str(course_id), threading.Lock())

    def generate_quiz_for_course(self, course_id: str) -> QuizGenerationResult:
        """
        Generate the final quiz for a course, or return the existing one.

        Args:
            course_id: Course to generate for

        Returns:
            QuizGenerationResult describing the (new or existing) quiz

        Raises:
            NoMaterialsFoundError: If the course has no usable material records
            AllExtractionsFailedError: If no material yielded enough text
            InsufficientQuestionsError: If consolidation kept too few questions
        """
        course_id = str(course_id)
        print(f"\n=== Starting quiz generation for course {course_id} ===")

        with self._course_lock(course_id):
            existing = self.check_existing_quiz(course_id)
            if existing:
                print(f"✓ Quiz already exists for this course: {existing.quiz_id}")
                return QuizGenerationResult(
                    success=True,
                    quiz_id=existing.quiz_id,
                    total_questions=existing.total_questions,
                    total_marks=existing.total_marks,
                    message="Quiz already generated"
                )

            materials = self.fetch_course_materials(course_id)
            if not materials:
                raise NoMaterialsFoundError(course_id)

            extracted = self.extract_texts_from_materials(course_id, materials)

            chunks = self.chunking_service.chunk_multiple_documents(extracted)
            print(f"Created {len(chunks)} chunks for generation\n")

            candidates = self.generation_client.generate_from_chunks(
                chunks, pacing_delay=self.pacing_delay)

            final_questions = self.consolidation_service.consolidate(candidates)
            target = sum(self.consolidation_service.target_distribution.values())
            if len(final_questions) < self.min_final_questions:
                raise InsufficientQuestionsError(len(final_questions), target)

            quiz = self.quiz_store.save(self.build_quiz(course_id, final_questions))
            print(f"✓ Quiz saved successfully: {quiz.quiz_id}")

            return QuizGenerationResult(
                success=True,
                quiz_id=quiz.quiz_id,
                total_questions=quiz.total_questions,
                total_marks=quiz.total_marks,
                message="Quiz generated successfully"
            )

    def check_existing_quiz(self, course_id: str) -> Optional[Quiz]:
        return self.quiz_store.find_active_ai_quiz(
            str(course_id), week_number=config.FINAL_QUIZ_WEEK_NUMBER)

    def get_quiz_for_course(self, course_id: str) -> Optional[Quiz]:
        """Return the active AI-generated final quiz for a course, if any."""
        return self.check_existing_quiz(course_id)

    def fetch_course_materials(self, course_id: str) -> List[Material]:
        """
        Collect course materials and file-bearing assignments as one list.

        Assignments with an attached file are normalized to 'pdf' content.
        """
        materials: List[Material] = []
        assignments = 0

        for material in self.material_locator.list_materials(course_id):
            if material.content_type in config.MATERIAL_CONTENT_TYPES:
                materials.append(material)
            elif material.content_type == config.ASSIGNMENT_CONTENT_TYPE and material.file_ref:
                materials.append(material.model_copy(update={"content_type": "pdf"}))
                assignments += 1

        print(f"Found {len(materials) - assignments} course materials and "
              f"{assignments} assignment materials for course {course_id}")
        return materials

    def extract_texts_from_materials(
        self,
        course_id: str,
        materials: List[Material]
    ) -> List[ExtractedText]:
        """
        Extract text from every material, skipping the ones that fail.

        Raises:
            AllExtractionsFailedError: If every material failed
        """
        extracted: List[ExtractedText] = []
        failed: List[str] = []

        for material in materials:
            print(f"  Processing material: {material.title}")
            try:
                text = self.extract_material(material)
                extracted.append(ExtractedText(
                    source_title=material.title,
                    text=text,
                    source_material_id=material.material_id
                ))
                print(f"    ✓ Extracted {len(text)} characters")
            except Exception as e:
                print(f"    ✗ Failed to extract text from {material.title}: {e}")
                failed.append(material.title)

        print(f"Total texts extracted: {len(extracted)}, failed materials: {len(failed)}\n")

        if not extracted:
            raise AllExtractionsFailedError(course_id, failed)
        return extracted

    def extract_material(self, material: Material) -> str:
        """
        Resolve, extract and validate the text of one material.

        Blob references are downloaded to a temporary file that is always
        deleted afterwards.
        """
        if not material.file_ref:
            raise ExtractionError(f"Material {material.title} has no file reference")

        blob_id = parse_blob_reference(material.file_ref)
        if blob_id:
            if self.blob_fetcher is None:
                raise ExtractionError(f"No blob fetcher configured for {material.file_ref}")
            local_path = self.blob_fetcher.fetch_to_local_file(material.file_ref)
            try:
                text = self.extraction_service.extract_text(local_path)
            finally:
                try:
                    self.blob_fetcher.delete_local_file(local_path)
                except OSError as e:
                    print(f"    ⚠️ Failed to clean up temp file: {e}")
        else:
            file_path = self.resolve_file_path(material.file_ref)
            if not file_path.is_file():
                raise MaterialFileNotFoundError(str(file_path))
            text = self.extraction_service.extract_text(str(file_path))

        if len(text.strip()) <= self.min_extracted_chars:
            raise ExtractionError(
                f"Insufficient text extracted ({len(text.strip())} characters)")
        return text

    def resolve_file_path(self, file_ref: str) -> Path:
        """Map an uploads URL, uploads-relative path or absolute path to a local path."""
        if file_ref.startswith(("http://", "https://")):
            url_path = urlparse(file_ref).path
            return self.uploads_dir / url_path.replace("/uploads/", "", 1).lstrip("/")

        if file_ref.startswith("/uploads/"):
            return self.uploads_dir / file_ref[len("/uploads/"):]

        path = Path(file_ref)
        if path.is_absolute():
            return path
        return self.uploads_dir / file_ref

    def build_quiz(self, course_id: str, final_questions: List[FinalQuestion]) -> Quiz:
        """
        Build the persisted quiz document.

        MCQs become gradable questions; short-answer and conceptual questions
        are kept as ungraded review questions.
        """
        mcqs = [q for q in final_questions if q.type == "mcq"]
        review = [q for q in final_questions if q.type != "mcq"]
        distribution = self.consolidation_service.get_question_distribution(final_questions)

        formatted = [
            FormattedQuestion(
                question_id=index,
                question=q.question.question,
                options=[q.question.options[letter] for letter in OPTION_LETTERS],
                correct_answer=OPTION_LETTERS.index(q.question.correct_answer),
                marks=q.points,
                difficulty=config.DEFAULT_DIFFICULTY,
                explanation=""
            )
            for index, q in enumerate(mcqs, start=1)
        ]

        return Quiz(
            quiz_id=uuid.uuid4().hex,
            course_id=str(course_id),
            week_number=config.FINAL_QUIZ_WEEK_NUMBER,
            title=config.QUIZ_TITLE,
            topic=config.QUIZ_TOPIC,
            description=(
                f"AI-generated quiz covering all course materials. Includes "
                f"{distribution['mcq']} MCQs, {distribution['short_answer']} short answers, "
                f"and {distribution['conceptual']} conceptual questions."
            ),
            time_limit=config.QUIZ_TIME_LIMIT_MINUTES,
            total_marks=sum(q.marks for q in formatted),
            total_questions=len(formatted),
            questions=formatted,
            review_questions=review,
            status="Active",
            ai_generated=True,
            created_by=config.QUIZ_CREATED_BY,
            created_at=datetime.now(timezone.utc)
        )

    def display_summary(self, quiz: Quiz):
        """
        Display a summary of a generated quiz.

        Args:
            quiz: Quiz to summarize
        """
        print("\n" + "="*70)
        print("QUIZ SUMMARY")
        print("="*70)

        print(f"\nQuiz ID: {quiz.quiz_id}")
        print(f"Course: {quiz.course_id}")
        print(f"Title: {quiz.title} ({quiz.time_limit} minutes)")
        print(f"Graded Questions: {quiz.total_questions}")
        print(f"Review Questions: {len(quiz.review_questions)}")
        print(f"Total Marks: {quiz.total_marks}")

        if quiz.questions:
            print("\n" + "-"*70)
            print("SAMPLE QUESTION")
            print("-"*70)
            q = quiz.questions[0]
            print(f"\nQ{q.question_id}: {q.question}")
            for i, option in enumerate(q.options):
                marker = "✓" if i == q.correct_answer else " "
                print(f"  {marker} {OPTION_LETTERS[i]}) {option}")

        print("\n" + "="*70 + "\n")


def main():
    """Generate the final quiz for one course from local files."""
    parser = argparse.ArgumentParser(description="Generate the final AI quiz for a course.")
    parser.add_argument("course_id", help="Course whose materials live in <files-dir>/<course_id>/")
    parser.add_argument("--files-dir", default=config.FILES_DIR)
    parser.add_argument("--uploads-dir", default=config.UPLOADS_DIR)
    parser.add_argument("--blobs-dir", default=config.BLOBS_DIR)
    parser.add_argument("--output-dir", default=config.OUTPUT_DIR)
    args = parser.parse_args()

    print("="*70)
    print("COURSE QUIZ GENERATOR")
    print("="*70 + "\n")

    # Load environment variables first
    load_env()

    api_key = os.environ.get("GEMINI_API_KEY")
    if not api_key:
        print("ERROR: GEMINI_API_KEY environment variable not set.")
        print("Please set it using: export GEMINI_API_KEY='your-api-key'")
        return

    from src.course_quiz_generator.storage.json_store import JsonQuizStore
    from src.course_quiz_generator.storage.materials import (
        DirectoryMaterialLocator,
        LocalBlobFetcher,
    )

    try:
        orchestrator = QuizOrchestrator(
            material_locator=DirectoryMaterialLocator(args.files_dir),
            quiz_store=JsonQuizStore(str(Path(args.output_dir) / config.QUIZZES_FILE)),
            blob_fetcher=LocalBlobFetcher(args.blobs_dir),
            uploads_dir=args.uploads_dir
        )

        result = orchestrator.generate_quiz_for_course(args.course_id)
        print(f"\n✓ {result.message}")

        quiz = orchestrator.get_quiz_for_course(args.course_id)
        if quiz:
            orchestrator.display_summary(quiz)

    except QuizPipelineError as e:
        print(f"\n✗ ERROR: {e}")
        print("\nPlease ensure:")
        print(f"  1. Course materials exist in '{Path(args.files_dir) / args.course_id}'")
        print("  2. The materials are PDF, DOC/DOCX, PPT/PPTX or TXT files with enough text")
        print("  3. Run the script again")
    except Exception as e:
        print(f"\n✗ ERROR: {e}")
        import traceback
        traceback.print_exc()


if __name__ == "__main__":
    main()
