"""
Error taxonomy for the assessment pipeline.

Material- and chunk-level errors are recovered by the orchestrator; the
run-level errors below are what callers of the pipeline see.
"""
from datetime import datetime
from typing import Optional


class QuizPipelineError(Exception):
    """Base class for all pipeline and attempt errors."""


class ExtractionError(QuizPipelineError):
    """A document could not be parsed into text."""


class UnsupportedFileTypeError(ExtractionError):
    """The file extension has no extractor."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unsupported file type: {extension or '(none)'}")


class MaterialFileNotFoundError(ExtractionError, FileNotFoundError):
    """The material file does not exist on disk."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(f"File not found: {file_path}")


class NoMaterialsFoundError(QuizPipelineError):
    def __init__(self, course_id: str):
        self.course_id = course_id
        super().__init__(
            f"No course materials found for quiz generation (course {course_id})")


class AllExtractionsFailedError(QuizPipelineError):
    def __init__(self, course_id: str, failed_materials: list):
        self.course_id = course_id
        self.failed_materials = list(failed_materials)
        super().__init__(
            f"Failed to extract text from course materials "
            f"({len(self.failed_materials)} material(s) failed)")


class InsufficientQuestionsError(QuizPipelineError):
    def __init__(self, generated: int, target: int):
        self.generated = generated
        self.target = target
        super().__init__(
            f"Insufficient questions generated: {generated}/{target}. "
            f"Need more course materials.")


class GenerationBackendExhaustedError(QuizPipelineError):
    """All retries against the LLM backend failed for one chunk."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"All {attempts} generation attempts failed: {last_error}")


class QuizNotFoundError(QuizPipelineError):
    def __init__(self, quiz_id: str):
        self.quiz_id = quiz_id
        super().__init__(f"Quiz not found: {quiz_id}")


class IneligibleError(QuizPipelineError):
    """A student tried to submit an attempt they are not allowed to make."""

    def __init__(self, block_reason: Optional[str],
                 block_expires_at: Optional[datetime] = None):
        self.block_reason = block_reason or "Cannot attempt quiz"
        self.block_expires_at = block_expires_at
        message = self.block_reason
        if block_expires_at is not None:
            message += f" (blocked until {block_expires_at.date().isoformat()})"
        super().__init__(message)
