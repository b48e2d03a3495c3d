"""Field extractors for contract and invoice text.

Each extractor is a pure function over the full document text. They are
independent of each other, never raise on odd input, and report what they
found together with a confidence value and the text that produced it.
A field that cannot be found is absent (None or an empty list), never a
zero-confidence placeholder.
"""

import re
from typing import List, Optional

from taxdocs.models.contract import (
    ContractClause,
    ContractParty,
    DepreciationInfo,
    ExtractedField,
    KeyDate,
    PaymentSchedule,
)
from taxdocs.services import patterns
from taxdocs.services.identifiers import validate_abn, validate_acn
from taxdocs.utils.normalizers import is_iso_date, normalize_date, parse_amount

TYPE_CONFIDENCE = 0.85
NUMBER_CONFIDENCE = 0.8
LABELLED_TOTAL_CONFIDENCE = 0.8
LARGEST_AMOUNT_CONFIDENCE = 0.6
PARTY_CONFIDENCE = 0.75
ABN_BONUS = 0.10
ACN_BONUS = 0.05
KEY_DATE_CONFIDENCE = 0.75
PAYMENT_WITH_AMOUNT_CONFIDENCE = 0.8
PAYMENT_PERCENT_ONLY_CONFIDENCE = 0.6
DEPRECIATION_CONFIDENCE = 0.7
EFFECTIVE_LIFE_BONUS = 0.1
CLAUSE_CONFIDENCE = 0.75
MAX_CLAUSES = 20

_LINE_SPLIT = re.compile(r"\n+")


def _lines(text: str) -> List[str]:
    return _LINE_SPLIT.split(text or "")


def _score(value: float) -> float:
    # Keep accumulated bonuses free of float noise (0.7 + 0.1 -> 0.8)
    return round(min(value, 1.0), 4)


def find_first_date(text: str) -> Optional[str]:
    """Return the first date in `text` as YYYY-MM-DD, trying formats in order.

    Matches that are not real calendar dates (45/99/2024) are skipped.
    """
    for pattern, fmt in patterns.DATE_PATTERNS:
        for match in pattern.finditer(text):
            normalized = normalize_date(match.group(0), fmt)
            if is_iso_date(normalized):
                return normalized
    return None


# ---------------------------------------------------------------------------
# Scalar fields
# ---------------------------------------------------------------------------

def extract_contract_type(text: str) -> Optional[ExtractedField[str]]:
    """Name the document type from the first matching type phrase."""
    for pattern, doc_type in patterns.CONTRACT_TYPE_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return ExtractedField[str](
                value=doc_type,
                confidence=TYPE_CONFIDENCE,
                source=f"Matched pattern: {match.group(0)}",
            )
    return None


def extract_contract_number(text: str) -> Optional[ExtractedField[str]]:
    """Find a contract, agreement, invoice or reference number."""
    for pattern in patterns.CONTRACT_NUMBER_PATTERNS:
        match = pattern.search(text or "")
        if match:
            return ExtractedField[str](
                value=match.group(1).strip(),
                confidence=NUMBER_CONFIDENCE,
                source=f"Matched: {match.group(0).strip()}",
            )
    return None


def extract_total_value(
    text: str,
    largest_amount_confidence: float = LARGEST_AMOUNT_CONFIDENCE,
) -> Optional[ExtractedField[float]]:
    """Find the total value of the document.

    Labelled totals ('Total Contract Value: $25,000.00') win. Without one,
    the largest currency amount anywhere in the text is used at a lower
    confidence.
    """
    text = text or ""
    for pattern in patterns.TOTAL_VALUE_PATTERNS:
        for match in pattern.finditer(text):
            amount = parse_amount(match.group(1))
            if amount is not None:
                return ExtractedField[float](
                    value=amount,
                    confidence=LABELLED_TOTAL_CONFIDENCE,
                    source=f"Matched: {match.group(0).strip()}",
                )

    amounts = [
        amount
        for pattern in patterns.MONEY_PATTERNS
        for match in pattern.finditer(text)
        if (amount := parse_amount(match.group(1))) is not None
    ]
    if not amounts:
        return None

    return ExtractedField[float](
        value=max(amounts),
        confidence=largest_amount_confidence,
        source="Largest amount found",
    )


# ---------------------------------------------------------------------------
# Parties
# ---------------------------------------------------------------------------

def _first_valid(pattern: re.Pattern[str], context: str, validator, skip: Optional[tuple[int, int]] = None):
    for match in pattern.finditer(context):
        if skip and match.start() < skip[1] and skip[0] < match.end():
            continue
        if validator(match.group(0)):
            return match
    return None


def extract_parties(text: str) -> List[ContractParty]:
    """Extract parties from '<role>: <name>' lines.

    The three lines either side of a party line are searched for an ABN
    and an ACN; each one that passes its checksum is attached to the
    party and raises its confidence.
    """
    lines = _lines(text)
    parties: List[ContractParty] = []

    for i, raw_line in enumerate(lines):
        line = raw_line.strip()
        for pattern, keyword in patterns.PARTY_LINE_PATTERNS:
            match = pattern.match(line)
            if not match:
                continue

            name = patterns.PARTY_NAME_ANNOTATION.sub("", match.group(1)).strip()
            if not name:
                continue

            lo = max(0, i - patterns.PARTY_CONTEXT_LINES)
            hi = min(len(lines), i + patterns.PARTY_CONTEXT_LINES + 1)
            context = " ".join(lines[lo:hi])

            confidence = PARTY_CONFIDENCE
            abn = acn = None

            abn_match = _first_valid(patterns.ABN_PATTERN, context, validate_abn)
            if abn_match:
                abn = re.sub(r"\s", "", abn_match.group(0))
                confidence += ABN_BONUS

            acn_match = _first_valid(
                patterns.ACN_PATTERN, context, validate_acn,
                skip=abn_match.span() if abn_match else None,
            )
            if acn_match:
                acn = re.sub(r"\s", "", acn_match.group(0))
                confidence += ACN_BONUS

            parties.append(ContractParty(
                name=name,
                abn=abn,
                acn=acn,
                role=patterns.PARTY_ROLES[keyword],
                confidence=_score(confidence),
            ))
            break

    return parties


# ---------------------------------------------------------------------------
# Dates and payments
# ---------------------------------------------------------------------------

def extract_key_dates(text: str) -> List[KeyDate]:
    """Extract dated events from lines that name one (commencement, review, ...)."""
    dates: List[KeyDate] = []

    for line in _lines(text):
        lowered = line.lower()
        for keyword, date_type in patterns.KEY_DATE_KEYWORDS:
            if keyword not in lowered:
                continue
            date = find_first_date(line)
            if date:
                dates.append(KeyDate(
                    date=date,
                    description=line.strip()[:100],
                    date_type=date_type,
                    confidence=KEY_DATE_CONFIDENCE,
                ))

    return dates


def extract_payment_schedules(text: str) -> List[PaymentSchedule]:
    """Extract deposit, installment, milestone and balance lines."""
    schedules: List[PaymentSchedule] = []

    for line in _lines(text):
        if not patterns.PAYMENT_LINE.search(line):
            continue

        amount_match = patterns.DOLLAR_AMOUNT.search(line)
        amount = parse_amount(amount_match.group(1)) if amount_match else None

        percentage = None
        for percent_match in patterns.PERCENTAGE.finditer(line):
            value = float(percent_match.group(1))
            if value <= 100:
                percentage = value
                break

        if amount is None and percentage is None:
            continue

        schedules.append(PaymentSchedule(
            description=line.strip()[:200],
            amount=amount if amount is not None else 0.0,
            due_date=find_first_date(line),
            percentage=percentage,
            is_milestone=bool(patterns.MILESTONE_LINE.search(line)),
            confidence=(
                PAYMENT_WITH_AMOUNT_CONFIDENCE if amount is not None
                else PAYMENT_PERCENT_ONLY_CONFIDENCE
            ),
        ))

    return schedules


# ---------------------------------------------------------------------------
# Depreciation
# ---------------------------------------------------------------------------

def extract_depreciation_info(text: str) -> List[DepreciationInfo]:
    """Extract depreciable assets from lines naming equipment and a price.

    Effective life and depreciation method are read from the asset line
    and the two lines after it.
    """
    lines = _lines(text)
    assets: List[DepreciationInfo] = []

    for i, line in enumerate(lines):
        lowered = line.lower()
        if not any(keyword in lowered for keyword in patterns.DEPRECIATION_KEYWORDS):
            continue

        amount_match = patterns.DOLLAR_AMOUNT.search(line)
        value = parse_amount(amount_match.group(1)) if amount_match else None
        if value is None:
            continue

        window = " ".join(lines[i:i + patterns.DEPRECIATION_LOOKAHEAD_LINES + 1])
        confidence = DEPRECIATION_CONFIDENCE

        effective_life = None
        life_match = patterns.EFFECTIVE_LIFE.search(window)
        if life_match:
            effective_life = int(life_match.group(1))
            confidence += EFFECTIVE_LIFE_BONUS

        method = None
        lowered_window = window.lower()
        for phrase, method_name in patterns.DEPRECIATION_METHODS:
            if phrase in lowered_window:
                method = method_name
                break

        assets.append(DepreciationInfo.from_value(
            asset_description=line.strip()[:200],
            asset_value=value,
            confidence=_score(confidence),
            effective_life_years=effective_life,
            depreciation_method=method,
        ))

    return assets


# ---------------------------------------------------------------------------
# Clauses
# ---------------------------------------------------------------------------

def categorize_clause(title: str) -> str:
    """Map a clause title to payment, termination, liability, IP or other."""
    for pattern, category in patterns.CLAUSE_CATEGORIES:
        if pattern.search(title):
            return category
    return "other"


def extract_important_clauses(text: str, max_clauses: int = MAX_CLAUSES) -> List[ContractClause]:
    """Extract numbered clause headers, keeping the first `max_clauses`."""
    clauses: List[ContractClause] = []

    for raw_line in _lines(text):
        line = raw_line.strip()
        for pattern in patterns.CLAUSE_HEADER_PATTERNS:
            match = pattern.match(line)
            if not match:
                continue
            number, title = match.group(1), match.group(2).strip()
            clauses.append(ContractClause(
                clause_number=number,
                title=title[:100],
                text=line[:500],
                category=categorize_clause(title),
                confidence=CLAUSE_CONFIDENCE,
            ))
            break

        if len(clauses) >= max_clauses:
            break

    return clauses
