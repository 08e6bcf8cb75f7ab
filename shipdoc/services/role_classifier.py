from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

"""Column role classifier for template metadata sheets.

A template's metadata sheet has one row per field and one column per
attribute, but the column headers differ between exports. This module decides
which column holds the field code, the description, the example value and the
requirement status.

Code/description/example are found by keyword. The requirement column goes
through an ordered cascade of strategies; each strategy either proposes a
column or returns None, and the first proposal wins:

1. semantic_match      - header mentions mandatory/required/usage/requirement
2. value_distribution  - cell values look like requirement tokens
3. positional_fallback - last column (best-effort guess, logged as a warning)
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ColumnRoles",
    "REQUIREMENT_CASCADE",
    "RoleCandidate",
    "classify_columns",
    "classify_requirement",
    "positional_fallback",
    "resolve_requirement_column",
    "semantic_match",
    "value_distribution",
]

CODE_KEYWORDS = ("code", "field id")
CODE_EXCLUDE_KEYWORDS = ("desc",)
DESCRIPTION_KEYWORDS = ("desc", "definition")
EXAMPLE_KEYWORDS = ("example",)
REQUIREMENT_HEADER_KEYWORDS = ("mandatory", "required", "usage", "requirement")

SAMPLE_ROWS = 50
EXACT_REQUIREMENT_TOKENS = frozenset({"required", "mandatory", "optional", "recommended"})
WEAK_REQUIREMENT_TOKENS = frozenset({"yes", "y", "r"})
REQUIREMENT_SUBSTRINGS = ("required", "mandatory")

REQUIRED_TOKENS = frozenset({"required", "mandatory", "r", "yes", "y"})
OPTIONAL_TOKENS = frozenset({"optional", "o", "no", "n"})
RECOMMENDED_TOKENS = frozenset({"recommended", "rec"})


@dataclass(frozen=True)
class RoleCandidate:
    header: str
    score: int  # 0 for rules that do not score
    strategy: str


@dataclass(frozen=True)
class ColumnRoles:
    code: str | None
    description: str | None
    example: str | None
    requirement: str | None
    requirement_strategy: str | None = None


RequirementStrategy = Callable[[Sequence[str], Sequence[Mapping[str, Any]], frozenset[str]], RoleCandidate | None]


def _cell_text(value: Any) -> str:
    if value is None or value == "":
        return ""
    return str(value).strip()


def _first_header(headers: Sequence[str], predicate: Callable[[str], bool]) -> str | None:
    return next((h for h in headers if predicate(h.lower())), None)


def find_code_column(headers: Sequence[str]) -> str | None:
    return _first_header(
        headers,
        lambda h: any(k in h for k in CODE_KEYWORDS) and not any(k in h for k in CODE_EXCLUDE_KEYWORDS),
    )


def find_description_column(headers: Sequence[str]) -> str | None:
    return _first_header(headers, lambda h: any(k in h for k in DESCRIPTION_KEYWORDS))


def find_example_column(headers: Sequence[str]) -> str | None:
    return _first_header(headers, lambda h: any(k in h for k in EXAMPLE_KEYWORDS))


def semantic_match(
    headers: Sequence[str], rows: Sequence[Mapping[str, Any]], claimed: frozenset[str]
) -> RoleCandidate | None:
    header = _first_header(headers, lambda h: any(k in h for k in REQUIREMENT_HEADER_KEYWORDS))
    if header is None:
        return None
    return RoleCandidate(header=header, score=0, strategy="semantic")


def _requirement_score(header: str, rows: Sequence[Mapping[str, Any]]) -> int:
    score = 0
    for row in rows[:SAMPLE_ROWS]:
        val = _cell_text(row.get(header)).lower()
        if val in EXACT_REQUIREMENT_TOKENS:
            score += 2
        elif any(s in val for s in REQUIREMENT_SUBSTRINGS) or val in WEAK_REQUIREMENT_TOKENS:
            score += 1
    return score


def value_distribution(
    headers: Sequence[str], rows: Sequence[Mapping[str, Any]], claimed: frozenset[str]
) -> RoleCandidate | None:
    best: RoleCandidate | None = None
    for header in headers:
        if header in claimed:
            continue
        score = _requirement_score(header, rows)
        # 同点は先勝ち
        if score > 0 and (best is None or score > best.score):
            best = RoleCandidate(header=header, score=score, strategy="value_distribution")
    return best


def positional_fallback(
    headers: Sequence[str], rows: Sequence[Mapping[str, Any]], claimed: frozenset[str]
) -> RoleCandidate | None:
    if not headers:
        return None
    return RoleCandidate(header=headers[-1], score=0, strategy="positional")


REQUIREMENT_CASCADE: tuple[RequirementStrategy, ...] = (
    semantic_match,
    value_distribution,
    positional_fallback,
)


def resolve_requirement_column(
    headers: Sequence[str],
    rows: Sequence[Mapping[str, Any]],
    claimed: frozenset[str] = frozenset(),
    strategies: Sequence[RequirementStrategy] = REQUIREMENT_CASCADE,
) -> RoleCandidate | None:
    for strategy in strategies:
        candidate = strategy(headers, rows, claimed)
        if candidate is not None:
            return candidate
    return None


def classify_columns(headers: Sequence[str], rows: Sequence[Mapping[str, Any]]) -> ColumnRoles:
    """Assign metadata-sheet columns to the code/description/example/requirement roles."""
    code = find_code_column(headers)
    description = find_description_column(headers)
    example = find_example_column(headers)
    claimed = frozenset(h for h in (code, description, example) if h is not None)

    candidate = resolve_requirement_column(headers, rows, claimed)
    if candidate is not None and candidate.strategy == "positional":
        logger.warning(
            f"requirement column not identifiable from headers or values; using last column '{candidate.header}'"
        )
    elif candidate is not None and candidate.strategy == "value_distribution":
        logger.info(f"requirement column found by value analysis: '{candidate.header}' (score={candidate.score})")

    roles = ColumnRoles(
        code=code,
        description=description,
        example=example,
        requirement=candidate.header if candidate else None,
        requirement_strategy=candidate.strategy if candidate else None,
    )
    logger.debug(
        f"metadata columns: headers={list(headers)} code={roles.code} description={roles.description} "
        f"example={roles.example} requirement={roles.requirement}"
    )
    return roles


def classify_requirement(value: Any) -> bool:
    """Map a requirement cell to required (True) / optional (False)."""
    val = _cell_text(value).lower()
    if val in REQUIRED_TOKENS:
        return True
    if val in OPTIONAL_TOKENS or val in RECOMMENDED_TOKENS:
        return False
    return any(s in val for s in REQUIREMENT_SUBSTRINGS)
