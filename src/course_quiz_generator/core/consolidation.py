"""
Quiz consolidation: deduplicate, score and select the final question set.
"""
import re
from collections import Counter
from typing import Dict, List, Optional

from src.course_quiz_generator.models.question_models import (
    CandidateQuestion,
    FinalQuestion,
    McqQuestion,
    OPTION_LETTERS,
    QUESTION_TYPES,
    ScoredQuestion,
    ShortAnswerQuestion,
)
from src.course_quiz_generator import config

_PUNCTUATION_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Lowercase, strip punctuation and collapse whitespace."""
    text = _PUNCTUATION_RE.sub("", (text or "").lower())
    return _WHITESPACE_RE.sub(" ", text).strip()


def bigram_similarity(first: str, second: str) -> float:
    """
    Dice coefficient over character bigrams, ignoring whitespace.

    Returns 1.0 for identical strings and 0.0 when either string has fewer
    than two characters.
    """
    first = _WHITESPACE_RE.sub("", first)
    second = _WHITESPACE_RE.sub("", second)

    if first == second:
        return 1.0
    if len(first) < 2 or len(second) < 2:
        return 0.0

    first_bigrams = Counter(first[i:i + 2] for i in range(len(first) - 1))
    second_bigrams = Counter(second[i:i + 2] for i in range(len(second) - 1))
    intersection = sum((first_bigrams & second_bigrams).values())

    return (2.0 * intersection) / (len(first) + len(second) - 2)


class QuizConsolidationService:
    """Turn all candidate questions into the fixed-distribution final set."""

    def __init__(
        self,
        similarity_threshold: Optional[float] = None,
        min_quality_score: Optional[float] = None,
        target_distribution: Optional[Dict[str, int]] = None,
        points_by_type: Optional[Dict[str, int]] = None
    ):
        self.similarity_threshold = (
            config.SIMILARITY_THRESHOLD if similarity_threshold is None else similarity_threshold)
        self.min_quality_score = (
            config.MIN_QUALITY_SCORE if min_quality_score is None else min_quality_score)
        self.target_distribution = dict(target_distribution or config.TARGET_DISTRIBUTION)
        self.points_by_type = dict(points_by_type or config.POINTS_BY_TYPE)

    def consolidate(self, questions: List[CandidateQuestion]) -> List[FinalQuestion]:
        """
        Deduplicate, score and select questions.

        Args:
            questions: Candidate questions from every chunk

        Returns:
            Final questions in type order (mcq, short_answer, conceptual),
            numbered from 1, at most the target count per type
        """
        print(f"Consolidating {len(questions)} questions...")

        grouped = self.group_by_type(questions)
        deduplicated = self.deduplicate(grouped)
        scored = self.score_questions(deduplicated)
        selected = self.select_best(scored)

        print(f"✓ Final selection: {len(selected)} questions\n")
        return selected

    def group_by_type(self, questions: List[CandidateQuestion]) -> Dict[str, List[CandidateQuestion]]:
        grouped: Dict[str, List[CandidateQuestion]] = {t: [] for t in QUESTION_TYPES}
        for question in questions:
            grouped.setdefault(question.type, []).append(question)
        return grouped

    def deduplicate(
        self,
        grouped: Dict[str, List[CandidateQuestion]]
    ) -> Dict[str, List[CandidateQuestion]]:
        """
        Drop near-duplicates within each type. First seen wins.

        A question is a duplicate when its normalized text is more similar
        than similarity_threshold to any already accepted question of the
        same type.
        """
        deduplicated: Dict[str, List[CandidateQuestion]] = {}

        for qtype, questions in grouped.items():
            unique: List[CandidateQuestion] = []
            seen: List[str] = []

            for question in questions:
                normalized = normalize_text(question.question)
                if any(bigram_similarity(normalized, other) > self.similarity_threshold
                       for other in seen):
                    continue
                unique.append(question)
                seen.append(normalized)

            deduplicated[qtype] = unique
            if questions:
                removed = len(questions) - len(unique)
                print(f"  {qtype}: {len(questions)} → {len(unique)} (removed {removed} duplicates)")

        return deduplicated

    def calculate_quality_score(self, question: CandidateQuestion) -> float:
        """Heuristic well-formedness score in [0, 1]."""
        score = 0.0
        text = question.question or ""

        if 20 <= len(text) <= 200:
            score += 0.3

        if 5 <= len(text.split()) <= 40:
            score += 0.2

        if isinstance(question, McqQuestion):
            options = question.options or {}
            if len(options) == 4:
                score += 0.2
            if question.correct_answer in OPTION_LETTERS:
                score += 0.15
            if options:
                mean_length = sum(len(o) for o in options.values()) / len(options)
                if 10 <= mean_length <= 80:
                    score += 0.15
        else:
            answer = (question.expected_answer if isinstance(question, ShortAnswerQuestion)
                      else question.key_points)
            if answer and len(answer) >= 10:
                score += 0.3

        return round(min(score, 1.0), 2)

    def score_questions(
        self,
        grouped: Dict[str, List[CandidateQuestion]]
    ) -> Dict[str, List[ScoredQuestion]]:
        """Score every question and sort each type by descending score."""
        scored: Dict[str, List[ScoredQuestion]] = {}
        for qtype, questions in grouped.items():
            scored[qtype] = sorted(
                (ScoredQuestion(question=q, quality_score=self.calculate_quality_score(q))
                 for q in questions),
                key=lambda s: s.quality_score,
                reverse=True
            )
        return scored

    def select_best(self, scored: Dict[str, List[ScoredQuestion]]) -> List[FinalQuestion]:
        """
        Keep the best questions above the quality floor for each type.

        Args:
            scored: Scored questions grouped by type

        Returns:
            Final questions with sequential numbers and points
        """
        selected: List[ScoredQuestion] = []

        for qtype, target in self.target_distribution.items():
            candidates = [s for s in scored.get(qtype, [])
                          if s.quality_score >= self.min_quality_score]
            candidates.sort(key=lambda s: s.quality_score, reverse=True)
            chosen = candidates[:target]
            selected.extend(chosen)
            print(f"  Selected {len(chosen)}/{target} {qtype} questions "
                  f"(quality threshold: {self.min_quality_score})")

        return [
            FinalQuestion(
                question=s.question,
                quality_score=s.quality_score,
                question_number=index,
                points=self.assign_points(s.type)
            )
            for index, s in enumerate(selected, start=1)
        ]

    def assign_points(self, qtype: str) -> int:
        return self.points_by_type.get(qtype, 1)

    @staticmethod
    def calculate_total_points(questions: List[FinalQuestion]) -> int:
        return sum(q.points for q in questions)

    @staticmethod
    def get_question_distribution(questions: List[FinalQuestion]) -> Dict[str, int]:
        distribution = {t: 0 for t in QUESTION_TYPES}
        for q in questions:
            if q.type in distribution:
                distribution[q.type] += 1
        return distribution
