"""
Paragraph-aligned chunking of extracted course text.
"""
import re
from typing import List, Optional

from src.course_quiz_generator.models.material_models import Chunk, ExtractedText
from src.course_quiz_generator import config

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n+")


class ChunkingService:
    """Greedily pack whole paragraphs into chunks sized for one generation call."""

    def __init__(
        self,
        min_chunk_size: Optional[int] = None,
        target_chunk_size: Optional[int] = None,
        max_chunk_size: Optional[int] = None
    ):
        self.min_chunk_size = min_chunk_size or config.MIN_CHUNK_SIZE
        self.target_chunk_size = target_chunk_size or config.TARGET_CHUNK_SIZE
        self.max_chunk_size = max_chunk_size or config.MAX_CHUNK_SIZE

    @staticmethod
    def count_words(text: str) -> int:
        if not text:
            return 0
        return len(text.split())

    def chunk_text(self, text: str, source_title: str = "unknown") -> List[Chunk]:
        """
        Split text into chunks of whole paragraphs.

        A chunk is flushed before adding a paragraph that would push it past
        max_chunk_size (once it holds at least min_chunk_size words), and
        after it reaches target_chunk_size. A trailing remainder shorter than
        min_chunk_size / 2 words is dropped.

        Args:
            text: Cleaned document text
            source_title: Title recorded on every chunk

        Returns:
            Chunks numbered from 1
        """
        if not text:
            return []

        paragraphs = [p.strip() for p in _PARAGRAPH_SPLIT_RE.split(text) if p.strip()]
        if not paragraphs:
            return []

        chunks: List[Chunk] = []
        buffer: List[str] = []
        buffer_words = 0

        def flush():
            chunks.append(Chunk(
                chunk_id=len(chunks) + 1,
                source_title=source_title,
                text="\n\n".join(buffer).strip(),
                word_count=buffer_words
            ))

        for paragraph in paragraphs:
            paragraph_words = self.count_words(paragraph)

            if (buffer_words + paragraph_words > self.max_chunk_size
                    and buffer_words >= self.min_chunk_size):
                flush()
                buffer, buffer_words = [], 0

            buffer.append(paragraph)
            buffer_words += paragraph_words

            if buffer_words >= self.target_chunk_size:
                flush()
                buffer, buffer_words = [], 0

        if buffer and buffer_words >= self.min_chunk_size / 2:
            flush()

        return chunks

    def chunk_multiple_documents(self, documents: List[ExtractedText]) -> List[Chunk]:
        """
        Chunk several documents with globally sequential chunk IDs.

        Args:
            documents: Extracted texts in processing order

        Returns:
            All chunks, numbered from 1 across documents
        """
        all_chunks: List[Chunk] = []
        for doc in documents:
            for chunk in self.chunk_text(doc.text, source_title=doc.source_title or "unknown"):
                all_chunks.append(chunk.model_copy(update={"chunk_id": len(all_chunks) + 1}))
        return all_chunks
