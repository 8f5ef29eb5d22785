"""
Grade Scale

The single mapping from a score percentage to a letter grade and GPA
points used by every grade listing and summary.

    >= 90  A  4.0
    >= 80  B  3.0
    >= 70  C  2.0
    >= 60  D  1.0
    else   F  0.0

A max score of 0 has no percentage and yields N/A / 0.0.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LetterGrade:
    letter: str
    points: float


NOT_APPLICABLE = LetterGrade("N/A", 0.0)
FAILING = LetterGrade("F", 0.0)

BANDS: tuple[tuple[float, LetterGrade], ...] = (
    (90.0, LetterGrade("A", 4.0)),
    (80.0, LetterGrade("B", 3.0)),
    (70.0, LetterGrade("C", 2.0)),
    (60.0, LetterGrade("D", 1.0)),
)


def percentage(score: float, max_score: float) -> float | None:
    if max_score <= 0:
        return None
    return score / max_score * 100


def letter_for_percentage(pct: float | None) -> LetterGrade:
    if pct is None:
        return NOT_APPLICABLE
    for threshold, grade in BANDS:
        if pct >= threshold:
            return grade
    return FAILING


def letter_grade(score: float, max_score: float) -> LetterGrade:
    """Letter grade and GPA points for score out of max_score."""
    return letter_for_percentage(percentage(score, max_score))
