"""
Parser for the line-based question format returned by the generation model.

Grammar (one token per line)::

    reply    := section*
    section  := SECTION block*            SECTION = "MCQ:" | "SHORT:" | "CONCEPTUAL:"
    block    := QUESTION line*            QUESTION = "Q<n>:" text
    line     := OPTION | CORRECT | ANSWER | TEXT
    OPTION   := "A)".."D)" text
    CORRECT  := "CORRECT:" letter
    ANSWER   := "ANSWER:" text

Malformed blocks are returned as BlockParseError entries and never raise.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import ValidationError

from src.course_quiz_generator.models.question_models import (
    CandidateQuestion,
    ConceptualQuestion,
    McqQuestion,
    OPTION_LETTERS,
    ShortAnswerQuestion,
)

SECTION = "section"
QUESTION = "question"
OPTION = "option"
CORRECT = "correct"
ANSWER = "answer"
TEXT = "text"

_SECTION_TYPES = {
    "MCQ": "mcq",
    "SHORT": "short_answer",
    "SHORT ANSWER": "short_answer",
    "CONCEPTUAL": "conceptual",
}

_MARKUP_RE = re.compile(r"^[\s*#_>`]+|[\s*_`]+$")
_SECTION_RE = re.compile(r"^(MCQ|SHORT ANSWER|SHORT|CONCEPTUAL)S?\s*:\s*(.*)$", re.IGNORECASE)
_QUESTION_RE = re.compile(r"^Q\s*(\d+)\s*[:.)]\s*(.*)$", re.IGNORECASE)
_OPTION_RE = re.compile(r"^([A-D])\)\s*(.*)$")
_CORRECT_RE = re.compile(r"^CORRECT(?: ANSWER)?\s*:\s*(.*)$", re.IGNORECASE)
_ANSWER_RE = re.compile(r"^(?:ANSWER|KEY POINTS)\s*:\s*(.*)$", re.IGNORECASE)
_CORRECT_LETTER_RE = re.compile(r"^[\[(\s]*([A-Da-d])(?![A-Za-z])")


@dataclass
class Token:
    kind: str
    value: str = ""
    key: Optional[str] = None
    line_no: int = 0


@dataclass
class BlockParseError:
    section: str
    question_number: Optional[int]
    reason: str


@dataclass
class ParseResult:
    questions: List[CandidateQuestion] = field(default_factory=list)
    errors: List[BlockParseError] = field(default_factory=list)


def tokenize(reply: str) -> List[Token]:
    """Classify each non-empty line of a model reply."""
    tokens: List[Token] = []
    for line_no, raw_line in enumerate((reply or "").splitlines(), start=1):
        line = _MARKUP_RE.sub("", raw_line).strip()
        if not line:
            continue

        match = _SECTION_RE.match(line)
        if match:
            tokens.append(Token(SECTION, match.group(2).strip(),
                                key=_SECTION_TYPES[match.group(1).upper()], line_no=line_no))
            continue

        match = _QUESTION_RE.match(line)
        if match:
            tokens.append(Token(QUESTION, match.group(2).strip(),
                                key=match.group(1), line_no=line_no))
            continue

        match = _OPTION_RE.match(line)
        if match:
            tokens.append(Token(OPTION, match.group(2).strip(),
                                key=match.group(1), line_no=line_no))
            continue

        match = _CORRECT_RE.match(line)
        if match:
            tokens.append(Token(CORRECT, match.group(1).strip(), line_no=line_no))
            continue

        match = _ANSWER_RE.match(line)
        if match:
            tokens.append(Token(ANSWER, match.group(1).strip(), line_no=line_no))
            continue

        tokens.append(Token(TEXT, line, line_no=line_no))
    return tokens


class _Block:
    def __init__(self, section: str, number: Optional[int], text: str):
        self.section = section
        self.number = number
        self.question = text
        self.options: List[tuple] = []
        self.correct: Optional[str] = None
        self.answer: Optional[str] = None

    def add(self, token: Token):
        if token.kind == OPTION:
            self.options.append((token.key, token.value))
        elif token.kind == CORRECT:
            # "B", "[B]", "B) Option text" all resolve to the letter
            match = _CORRECT_LETTER_RE.match(token.value)
            self.correct = match.group(1).upper() if match else token.value.upper()
        elif token.kind == ANSWER:
            self.answer = token.value
        elif token.kind == TEXT:
            if not self.question:
                self.question = token.value
            elif self.answer is not None and not self.options:
                self.answer = f"{self.answer} {token.value}".strip()


def _build_question(block: _Block, chunk_id: Optional[int], source: str):
    """Return a candidate question, or a reason string when the block is malformed."""
    if not block.question:
        return "missing question text"

    if block.section == "mcq":
        letters = [letter for letter, _ in block.options]
        if len(block.options) != 4 or sorted(letters) != OPTION_LETTERS:
            return f"expected options A-D, got {len(block.options)}"
        if any(not text for _, text in block.options):
            return "empty option text"
        if block.correct not in OPTION_LETTERS:
            return f"invalid correct answer {block.correct!r}"
        return McqQuestion(
            question=block.question,
            options=dict(block.options),
            correct_answer=block.correct,
            chunk_id=chunk_id,
            source=source
        )

    if not block.answer:
        return "missing answer"
    if block.section == "short_answer":
        return ShortAnswerQuestion(
            question=block.question,
            expected_answer=block.answer,
            chunk_id=chunk_id,
            source=source
        )
    return ConceptualQuestion(
        question=block.question,
        key_points=block.answer,
        chunk_id=chunk_id,
        source=source
    )


def parse_reply(reply: str, chunk_id: Optional[int] = None, source: str = "unknown") -> ParseResult:
    """
    Parse a model reply into typed candidate questions.

    Args:
        reply: Raw completion text
        chunk_id: Chunk the reply was generated from
        source: Title of the chunk's source material

    Returns:
        ParseResult with accepted questions and per-block errors
    """
    result = ParseResult()
    blocks: List[_Block] = []
    section: Optional[str] = None
    current: Optional[_Block] = None

    for token in tokenize(reply):
        if token.kind == SECTION:
            section = token.key
            current = None
        elif token.kind == QUESTION:
            if section is None:
                result.errors.append(BlockParseError(
                    "unknown", int(token.key), "question outside of a section"))
                current = None
                continue
            current = _Block(section, int(token.key), token.value)
            blocks.append(current)
        elif current is not None:
            current.add(token)

    for block in blocks:
        try:
            built = _build_question(block, chunk_id, source)
        except ValidationError as e:
            built = f"invalid fields: {e.error_count()} error(s)"
        if isinstance(built, str):
            result.errors.append(BlockParseError(block.section, block.number, built))
        else:
            result.questions.append(built)

    return result
