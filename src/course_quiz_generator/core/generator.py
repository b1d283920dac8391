"""
Question Generation Client.

Sends one chunk of course text at a time to Gemini with a fixed prompt
contract and parses the line-based reply into typed candidate questions.

Features:
- Fixed prompt requesting 3 MCQ, 2 short-answer and 1 conceptual question
- Linear retry backoff on backend failures
- Partial-parse tolerance: malformed question blocks are dropped
- Sequential multi-chunk generation with pacing between calls
"""
import os
import time
from typing import Any, List, Optional

from google import genai

from src.course_quiz_generator.core.reply_parser import parse_reply
from src.course_quiz_generator.exceptions import GenerationBackendExhaustedError
from src.course_quiz_generator.models.material_models import Chunk
from src.course_quiz_generator.models.question_models import CandidateQuestion
from src.course_quiz_generator import config
from src.course_quiz_generator.utils.env_loader import load_env


class QuestionGenerationClient:
    """Generate candidate quiz questions from course text chunks."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        system_instruction: Optional[str] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        client: Optional[Any] = None
    ):
        """
        Initialize the generation client.

        Args:
            api_key: Google AI API key. If not provided, uses GEMINI_API_KEY environment variable.
            model_name: Name of the Gemini model to use. If not provided, uses config.MODEL_NAME
            system_instruction: Custom system instruction. If not provided, uses config.SYSTEM_INSTRUCTION
            max_retries: Attempts per chunk before giving up.
            retry_delay: Base delay in seconds; attempt n waits retry_delay * n.
            client: Pre-built genai client, mainly for tests.
        """
        # Load environment variables
        load_env()

        if api_key:
            os.environ["GEMINI_API_KEY"] = api_key

        self.client = client or genai.Client(api_key=api_key)
        self.model_name = model_name or config.MODEL_NAME
        self.system_instruction = system_instruction or config.SYSTEM_INSTRUCTION
        self.max_retries = max_retries or config.MAX_RETRIES
        self.retry_delay = config.RETRY_DELAY_SECONDS if retry_delay is None else retry_delay

    def build_prompt(self, chunk_text: str) -> str:
        """Build the generation prompt, truncating the chunk to the prompt budget."""
        return config.DEFAULT_PROMPT_TEMPLATE.format(
            chunk_text=(chunk_text or "")[:config.PROMPT_CHUNK_CHARS]
        )

    def call_model_with_retry(self, prompt: str) -> str:
        """
        Call the model, retrying failed attempts with a linearly growing delay.

        Args:
            prompt: User prompt

        Returns:
            Completion text

        Raises:
            GenerationBackendExhaustedError: If every attempt failed
        """
        last_error = None
        for attempt in range(1, self.max_retries + 1):
            try:
                response = self.client.models.generate_content(
                    model=self.model_name,
                    contents=prompt,
                    config={
                        "system_instruction": self.system_instruction,
                        "temperature": config.GENERATION_TEMPERATURE,
                        "max_output_tokens": config.GENERATION_MAX_OUTPUT_TOKENS,
                    }
                )
                return response.text or ""
            except Exception as e:
                last_error = e
                print(f"    ✗ Attempt {attempt}/{self.max_retries} failed: {e}")
                if attempt < self.max_retries:
                    delay = self.retry_delay * attempt
                    print(f"    Retrying in {delay:g}s...")
                    time.sleep(delay)

        print("    ✗ All retry attempts failed")
        raise GenerationBackendExhaustedError(self.max_retries, last_error)

    def generate_from_chunk(
        self,
        chunk_text: str,
        chunk_id: Optional[int] = None,
        source: str = "unknown"
    ) -> List[CandidateQuestion]:
        """
        Generate candidate questions from one chunk.

        Args:
            chunk_text: Chunk text (truncated to the prompt budget)
            chunk_id: Chunk ID recorded on every question
            source: Source title recorded on every question

        Returns:
            Parsed candidate questions (malformed blocks dropped)

        Raises:
            GenerationBackendExhaustedError: If the backend failed on every retry
        """
        reply = self.call_model_with_retry(self.build_prompt(chunk_text))
        result = parse_reply(reply, chunk_id=chunk_id, source=source)

        for error in result.errors:
            print(f"    ⚠️ Dropped {error.section} block Q{error.question_number}: {error.reason}")

        return result.questions

    def generate_from_chunks(
        self,
        chunks: List[Chunk],
        pacing_delay: Optional[float] = None
    ) -> List[CandidateQuestion]:
        """
        Generate questions chunk by chunk, pausing between backend calls.

        A chunk whose retries are exhausted contributes no questions.

        Args:
            chunks: Chunks to process in order
            pacing_delay: Seconds to wait between chunks (config.CHUNK_PACING_SECONDS by default)

        Returns:
            All candidate questions across chunks
        """
        pacing = config.CHUNK_PACING_SECONDS if pacing_delay is None else pacing_delay
        all_questions: List[CandidateQuestion] = []

        print(f"Generating questions from {len(chunks)} chunks using {self.model_name}...")

        for index, chunk in enumerate(chunks):
            print(f"  Chunk {chunk.chunk_id} ({chunk.source_title}, {chunk.word_count} words)")
            try:
                questions = self.generate_from_chunk(
                    chunk.text,
                    chunk_id=chunk.chunk_id,
                    source=chunk.source_title
                )
                all_questions.extend(questions)
                print(f"    ✓ {len(questions)} questions")
            except GenerationBackendExhaustedError as e:
                print(f"    ✗ Skipping chunk {chunk.chunk_id}: {e}")

            if index < len(chunks) - 1 and pacing > 0:
                time.sleep(pacing)

        print(f"✓ Generated {len(all_questions)} candidate questions\n")
        return all_questions
