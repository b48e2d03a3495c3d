"""Four-stage waterfall document type classifier.

Determines whether extracted text is a receipt, bank statement, dividend
statement, invoice or contract using a cascade that stops as soon as a
stage is confident enough:

1. Keyword scoring (confidence >= CONFIDENCE_HIGH returns immediately)
2. Structure scoring (confidence >= CONFIDENCE_HIGH returns immediately)
3. Weighted combination of 1 and 2 (>= CONFIDENCE_MEDIUM)
4. Best of 1 and 2 (>= CONFIDENCE_LOW)

If no stage clears its bar the result is 'unknown' with confidence 1.0
and method 'fallback': a certain non-answer rather than a weak guess.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, NamedTuple, Optional

from taxdocs.models.classification import (
    KNOWN_DOCUMENT_TYPES,
    DocumentMetadata,
    DocumentTypeResult,
    StageResult,
)
from taxdocs.services import patterns
from taxdocs.utils.normalizers import detect_format, normalize_classifier_text

logger = logging.getLogger(__name__)

CONFIDENCE_HIGH = 0.85
CONFIDENCE_MEDIUM = 0.60
CONFIDENCE_LOW = 0.40

# Calibration parameters, tuned empirically
UNIQUE_IDENTIFIER_BONUS = 5.0
KEYWORD_OFFSET, KEYWORD_CAP = 0.3, 0.95
STRUCTURE_OFFSET, STRUCTURE_CAP = 0.2, 0.90
COMBINED_CAP = 0.98
KEYWORD_WEIGHT, STRUCTURE_WEIGHT = 0.6, 0.4


class Thresholds(NamedTuple):
    high: float = CONFIDENCE_HIGH
    medium: float = CONFIDENCE_MEDIUM
    low: float = CONFIDENCE_LOW


DEFAULT_THRESHOLDS = Thresholds()


# ---------------------------------------------------------------------------
# Scoring helpers
# ---------------------------------------------------------------------------

def _pick_best(scores: Dict[str, float]) -> tuple[str, float, float]:
    """Return (best_type, best_score, total_score); ties keep table order."""
    best_type, best_score = "unknown", 0.0
    for doc_type in KNOWN_DOCUMENT_TYPES:
        if scores.get(doc_type, 0.0) > best_score:
            best_type, best_score = doc_type, scores[doc_type]
    return best_type, best_score, sum(scores.values())


def _confidence(best: float, total: float, offset: float, cap: float) -> float:
    if total <= 0:
        return 0.0
    return round(min(best / total + offset, cap), 4)


# ---------------------------------------------------------------------------
# Stage 1 - keyword scoring
# ---------------------------------------------------------------------------

def keyword_detection_stage(
    text: str,
    unique_identifier_bonus: float = UNIQUE_IDENTIFIER_BONUS,
) -> StageResult:
    """Score each type by keyword occurrences plus unique-identifier bonuses.

    Args:
        text: Normalized text (see normalize_classifier_text).
        unique_identifier_bonus: Score added per occurrence of a unique identifier.
    """
    scores: Dict[str, float] = {doc_type: 0.0 for doc_type in KNOWN_DOCUMENT_TYPES}
    matches: Dict[str, List[str]] = {doc_type: [] for doc_type in KNOWN_DOCUMENT_TYPES}

    for doc_type, keyword_regexes in patterns.KEYWORD_REGEXES.items():
        for keyword, regex in keyword_regexes:
            count = len(regex.findall(text))
            if count:
                scores[doc_type] += count
                matches[doc_type].append(keyword)

    for doc_type, identifiers in patterns.UNIQUE_IDENTIFIERS.items():
        for identifier in identifiers:
            count = text.count(identifier)
            if count:
                scores[doc_type] += unique_identifier_bonus * count
                matches[doc_type].append(f"!{identifier}")

    best_type, best_score, total = _pick_best(scores)
    if best_score <= 0:
        return StageResult()

    return StageResult(
        type=best_type,
        confidence=_confidence(best_score, total, KEYWORD_OFFSET, KEYWORD_CAP),
        keywords=matches[best_type],
    )


# ---------------------------------------------------------------------------
# Stage 2 - structure scoring
# ---------------------------------------------------------------------------

def _has_tables(raw_text: str) -> bool:
    if patterns.TABLE_BORDER.search(raw_text):
        return True
    rows = 0
    for line in raw_text.splitlines():
        line = line.strip()
        if patterns.TABLE_PIPE_ROW.search(line) or patterns.TABLE_COLUMN_ROW.search(line):
            rows += 1
            if rows >= patterns.MIN_TABLE_ROWS:
                return True
    return False


def extract_structure_signals(raw_text: str) -> Dict[str, bool]:
    """Layout signals read from the raw (un-normalized) text.

    Tables need line breaks and column spacing, which normalization removes.
    """
    raw_text = raw_text or ""
    return {
        "has_tables": _has_tables(raw_text),
        "has_amounts": bool(patterns.HAS_AMOUNTS.search(raw_text)),
        "has_dates": bool(patterns.HAS_DATES.search(raw_text)),
        "has_abn": bool(patterns.HAS_ABN.search(raw_text)),
    }


def _rule_applies(
    rule: patterns.StructureRule,
    text: str,
    signals: Dict[str, bool],
    page_count: Optional[int],
) -> bool:
    if not all(signals.get(name) for name in rule.signals):
        return False
    if any(signals.get(name) for name in rule.absent_signals):
        return False
    if rule.all_phrases and not all(p in text for p in rule.all_phrases):
        return False
    if rule.any_phrases and not any(p in text for p in rule.any_phrases):
        return False
    if rule.min_page_count is not None and (page_count or 0) < rule.min_page_count:
        return False
    return True


def structure_detection_stage(
    text: str,
    signals: Dict[str, bool],
    page_count: Optional[int] = None,
) -> StageResult:
    """Score each type from layout signals and indicative phrases."""
    scores: Dict[str, float] = {doc_type: 0.0 for doc_type in KNOWN_DOCUMENT_TYPES}
    for rule in patterns.STRUCTURE_RULES:
        if _rule_applies(rule, text, signals, page_count):
            scores[rule.doc_type] += rule.points

    best_type, best_score, total = _pick_best(scores)
    if best_score <= 0:
        return StageResult()

    return StageResult(
        type=best_type,
        confidence=_confidence(best_score, total, STRUCTURE_OFFSET, STRUCTURE_CAP),
    )


# ---------------------------------------------------------------------------
# Stage 3 - weighted combination
# ---------------------------------------------------------------------------

def combine_results(keyword: StageResult, structure: StageResult) -> StageResult:
    """Weight keyword and structure confidences 60/40 per type.

    Agreement between the stages yields COMBINED_CAP; disagreement yields
    the winner's share of the weighted total.
    """
    scores: Dict[str, float] = {doc_type: 0.0 for doc_type in KNOWN_DOCUMENT_TYPES}
    keywords: Dict[str, List[str]] = {doc_type: [] for doc_type in KNOWN_DOCUMENT_TYPES}

    for result, weight in ((keyword, KEYWORD_WEIGHT), (structure, STRUCTURE_WEIGHT)):
        if result.type == "unknown":
            continue
        scores[result.type] += result.confidence * weight
        keywords[result.type].extend(k for k in result.keywords if k not in keywords[result.type])

    best_type, best_score, total = _pick_best(scores)
    if best_score <= 0:
        return StageResult()

    return StageResult(
        type=best_type,
        confidence=round(min(best_score / total, COMBINED_CAP), 4),
        keywords=keywords[best_type],
    )


# ---------------------------------------------------------------------------
# Waterfall
# ---------------------------------------------------------------------------

@dataclass
class _Waterfall:
    """Mutable state for one classification run.

    Stage results are computed lazily so later stages only run when the
    earlier ones did not clear their threshold.
    """
    raw_text: str
    text: str
    file_path: Optional[str]
    page_count: Optional[int]
    unique_identifier_bonus: float
    stage: int = 0
    keyword: Optional[StageResult] = None
    structure: Optional[StageResult] = None
    signals: Optional[Dict[str, bool]] = None

    def run_keyword(self) -> tuple[Optional[StageResult], str]:
        self.keyword = keyword_detection_stage(self.text, self.unique_identifier_bonus)
        return self.keyword, "keyword"

    def run_structure(self) -> tuple[Optional[StageResult], str]:
        self.signals = extract_structure_signals(self.raw_text)
        self.structure = structure_detection_stage(self.text, self.signals, self.page_count)
        return self.structure, "structure"

    def run_combination(self) -> tuple[Optional[StageResult], str]:
        if self.keyword.type == "unknown" or self.structure.type == "unknown":
            return None, "ml"
        return combine_results(self.keyword, self.structure), "ml"

    def run_best_effort(self) -> tuple[Optional[StageResult], str]:
        if self.keyword.confidence > self.structure.confidence:
            return self.keyword, "ml"
        return self.structure, "ml"


# (stage runner, threshold name); order is the waterfall order
_STAGES: List[tuple[Callable[[_Waterfall], tuple[Optional[StageResult], str]], str]] = [
    (_Waterfall.run_keyword, "high"),
    (_Waterfall.run_structure, "high"),
    (_Waterfall.run_combination, "medium"),
    (_Waterfall.run_best_effort, "low"),
]


def _build_result(
    stage_result: StageResult,
    method: str,
    state: _Waterfall,
) -> DocumentTypeResult:
    signals = state.signals or {}
    return DocumentTypeResult(
        type=stage_result.type,
        confidence=stage_result.confidence,
        method=method,
        metadata=DocumentMetadata(
            detected_keywords=list(stage_result.keywords),
            page_count=state.page_count,
            has_tables=signals.get("has_tables"),
            has_amounts=signals.get("has_amounts"),
            has_dates=signals.get("has_dates"),
            has_abn=signals.get("has_abn"),
            format=detect_format(state.file_path),
        ),
    )


def fallback_result(file_path: Optional[str] = None) -> DocumentTypeResult:
    """The certain non-answer returned when no stage is confident enough."""
    return DocumentTypeResult(
        type="unknown",
        confidence=1.0,
        method="fallback",
        metadata=DocumentMetadata(format=detect_format(file_path)),
    )


def detect_document_type(
    text: str,
    file_path: Optional[str] = None,
    *,
    page_count: Optional[int] = None,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    unique_identifier_bonus: float = UNIQUE_IDENTIFIER_BONUS,
) -> DocumentTypeResult:
    """Classify a document's type from its extracted text.

    Args:
        text: Plain text from the upstream text extractor.
        file_path: Optional source path; only its extension is used.
        page_count: Optional page count reported by the extractor.
        thresholds: Waterfall thresholds (high, medium, low).
        unique_identifier_bonus: Score per unique-identifier occurrence.

    Returns:
        DocumentTypeResult with type, confidence, method and metadata.
    """
    state = _Waterfall(
        raw_text=text or "",
        text=normalize_classifier_text(text),
        file_path=file_path,
        page_count=page_count,
        unique_identifier_bonus=unique_identifier_bonus,
    )

    for runner, threshold_name in _STAGES:
        state.stage += 1
        result, method = runner(state)
        if result is None or result.type == "unknown":
            continue
        if result.confidence >= getattr(thresholds, threshold_name):
            logger.debug(
                "Classified as %s (%.3f) at stage %d via %s",
                result.type, result.confidence, state.stage, method,
            )
            return _build_result(result, method, state)

    logger.debug("No stage reached its threshold; returning fallback")
    return fallback_result(file_path)


# ---------------------------------------------------------------------------
# Helpers for callers
# ---------------------------------------------------------------------------

DOCUMENT_TYPE_LABELS: Dict[str, str] = {
    "receipt": "Receipt",
    "bank_statement": "Bank Statement",
    "dividend_statement": "Dividend Statement",
    "invoice": "Invoice",
    "contract": "Contract",
    "unknown": "Unknown Document",
}

DOCUMENT_TYPE_ICONS: Dict[str, str] = {
    "receipt": "Receipt",
    "bank_statement": "Banknote",
    "dividend_statement": "TrendingUp",
    "invoice": "FileText",
    "contract": "FileSignature",
    "unknown": "FileQuestion",
}


def get_document_type_label(doc_type: str) -> str:
    return DOCUMENT_TYPE_LABELS.get(doc_type, DOCUMENT_TYPE_LABELS["unknown"])


def get_document_type_icon(doc_type: str) -> str:
    return DOCUMENT_TYPE_ICONS.get(doc_type, DOCUMENT_TYPE_ICONS["unknown"])


def is_confidence_acceptable(confidence: float, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> bool:
    """True when a result is confident enough for automatic processing."""
    return confidence >= thresholds.medium


def get_recommended_action(result: DocumentTypeResult, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> str:
    """Map a classification to 'accept', 'review' or 'manual_entry' by confidence."""
    if result.confidence >= thresholds.high:
        return "accept"
    if result.confidence >= thresholds.low:
        return "review"
    return "manual_entry"


def thresholds_from_settings(settings) -> Thresholds:
    """Build Thresholds from a Settings instance."""
    return Thresholds(
        high=settings.confidence_high,
        medium=settings.confidence_medium,
        low=settings.confidence_low,
    )


