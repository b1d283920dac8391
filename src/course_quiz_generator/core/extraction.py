"""
Text extraction for course materials.

Dispatches on file extension to a parser (pypdf for PDF, unstructured
for Word and PowerPoint files, plain read for text) and runs a
deterministic cleaning pass over the result. Cleaning performs no I/O.
"""
import re
from pathlib import Path
from typing import List

from src.course_quiz_generator.exceptions import (
    ExtractionError,
    MaterialFileNotFoundError,
    UnsupportedFileTypeError,
)
from src.course_quiz_generator.models.material_models import ExtractionReport

SUPPORTED_EXTENSIONS = (".pdf", ".doc", ".docx", ".ppt", ".pptx", ".txt")

_PAGE_LABEL_RE = re.compile(r"\bPage \d+\b", re.IGNORECASE)
_PAGE_OF_RE = re.compile(r"\d+ of \d+")
_NUMBER_LINE_RE = re.compile(r"^\d+$", re.MULTILINE)
_RUNNING_HEADER_RE = re.compile(
    r"^(Chapter|Section|Unit) \d+.*$", re.IGNORECASE | re.MULTILINE)
_INLINE_WS_RE = re.compile(r"[ \t]+")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_DISALLOWED_CHARS_RE = re.compile(r"[^\w\s.,;:!?()\-'\"/\n]", re.ASCII)


def clean_text(text: str) -> str:
    """
    Strip page labels, running headers and export noise from extracted text.

    Args:
        text: Raw text from a document parser

    Returns:
        Cleaned text, trimmed
    """
    if not text:
        return ""

    cleaned = text.replace("\r\n", "\n").replace("\r", "\n")

    # Page numbers
    cleaned = _PAGE_LABEL_RE.sub("", cleaned)
    cleaned = _PAGE_OF_RE.sub("", cleaned)
    cleaned = _NUMBER_LINE_RE.sub("", cleaned)

    # Running headers
    cleaned = _RUNNING_HEADER_RE.sub("", cleaned)

    # Whitespace
    cleaned = _INLINE_WS_RE.sub(" ", cleaned)
    cleaned = _BLANK_RUN_RE.sub("\n\n", cleaned)

    # Consecutive duplicate lines (slide exports repeat titles)
    unique_lines = []
    prev_line = ""
    for line in cleaned.split("\n"):
        trimmed = line.strip()
        if trimmed and trimmed != prev_line:
            unique_lines.append(line)
            prev_line = trimmed
        elif not trimmed:
            unique_lines.append("")

    cleaned = "\n".join(unique_lines)
    cleaned = _DISALLOWED_CHARS_RE.sub("", cleaned)

    return cleaned.strip()


class TextExtractionService:
    """Convert a document file into cleaned plain text."""

    def extract_text(self, file_path: str) -> str:
        """
        Extract and clean text from a single file.

        Args:
            file_path: Path to a .pdf, .doc, .docx, .ppt, .pptx or .txt file

        Returns:
            Cleaned text

        Raises:
            MaterialFileNotFoundError: If the file does not exist
            UnsupportedFileTypeError: If the extension is not supported
            ExtractionError: If the parser fails
        """
        path = Path(file_path)
        if not path.is_file():
            raise MaterialFileNotFoundError(str(file_path))

        ext = path.suffix.lower()
        if ext not in SUPPORTED_EXTENSIONS:
            raise UnsupportedFileTypeError(ext)

        try:
            if ext == ".pdf":
                raw_text = self._extract_from_pdf(path)
            elif ext in (".doc", ".docx"):
                raw_text = self._extract_from_word(path)
            elif ext in (".ppt", ".pptx"):
                raw_text = self._extract_from_slides(path)
            else:
                raw_text = path.read_text(encoding="utf-8", errors="replace")
        except ExtractionError:
            raise
        except Exception as e:
            raise ExtractionError(
                f"Failed to extract text from {path.name}: {e}") from e

        return clean_text(raw_text)

    def _extract_from_pdf(self, path: Path) -> str:
        from pypdf import PdfReader

        reader = PdfReader(str(path))
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n".join(pages)

    def _extract_from_word(self, path: Path) -> str:
        if path.suffix.lower() == ".docx":
            from unstructured.partition.docx import partition_docx
            elements = partition_docx(filename=str(path))
        else:
            from unstructured.partition.doc import partition_doc
            elements = partition_doc(filename=str(path))
        return self._join_elements(elements)

    def _extract_from_slides(self, path: Path) -> str:
        if path.suffix.lower() == ".pptx":
            from unstructured.partition.pptx import partition_pptx
            elements = partition_pptx(filename=str(path))
        else:
            from unstructured.partition.ppt import partition_ppt
            elements = partition_ppt(filename=str(path))
        return self._join_elements(elements)

    @staticmethod
    def _join_elements(elements) -> str:
        # One element per line; paragraphs stay blank-line separated for chunking
        texts = [str(el.text).strip() for el in elements if getattr(el, "text", None)]
        return "\n\n".join(t for t in texts if t)

    def extract_from_multiple_files(self, file_paths: List[str]) -> List[ExtractionReport]:
        """
        Extract text from several files, recording failures instead of raising.

        Args:
            file_paths: Paths to extract

        Returns:
            One ExtractionReport per input path, in order
        """
        results = []
        for file_path in file_paths:
            file_name = Path(file_path).name
            try:
                text = self.extract_text(file_path)
                results.append(ExtractionReport(
                    file_path=str(file_path),
                    file_name=file_name,
                    text=text,
                    word_count=len(text.split()),
                    success=True
                ))
            except ExtractionError as e:
                print(f"  ✗ Error extracting {file_name}: {e}")
                results.append(ExtractionReport(
                    file_path=str(file_path),
                    file_name=file_name,
                    success=False,
                    error=str(e)
                ))
        return results
