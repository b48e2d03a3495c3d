"""Pattern library shared by the field extractors and the document classifier.

Everything here is data: ordered rule tables that the extractors and the
classifier walk in order. Adding a contract type, a date format or a new
classifier signal means adding a row, not touching control flow.
"""

import re
from dataclasses import dataclass
from typing import Optional

# ---------------------------------------------------------------------------
# Shared fragments
# ---------------------------------------------------------------------------

# A currency number: leading digit, optional thousands separators, optional cents
AMOUNT = r"([0-9][0-9,]*(?:\.\d{2})?)"

# ---------------------------------------------------------------------------
# Contract / document type phrases (first match wins)
# ---------------------------------------------------------------------------

CONTRACT_TYPE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"service\s+agreement", re.IGNORECASE), "Service Agreement"),
    (re.compile(r"consulting\s+agreement", re.IGNORECASE), "Consulting Agreement"),
    (re.compile(r"contractor\s+agreement", re.IGNORECASE), "Contractor Agreement"),
    (re.compile(r"employment\s+contract", re.IGNORECASE), "Employment Contract"),
    (re.compile(r"lease\s+agreement", re.IGNORECASE), "Lease Agreement"),
    (re.compile(r"rental\s+agreement", re.IGNORECASE), "Rental Agreement"),
    (re.compile(r"purchase\s+order", re.IGNORECASE), "Purchase Order"),
    (re.compile(r"supply\s+agreement", re.IGNORECASE), "Supply Agreement"),
    (re.compile(r"maintenance\s+contract", re.IGNORECASE), "Maintenance Contract"),
    (re.compile(r"subscription\s+agreement", re.IGNORECASE), "Subscription Agreement"),
    (re.compile(r"software\s+licen[cs]e", re.IGNORECASE), "Software License"),
    (re.compile(r"terms\s+and\s+conditions", re.IGNORECASE), "Terms and Conditions"),
    (re.compile(r"tax\s+invoice", re.IGNORECASE), "Tax Invoice"),
    (re.compile(r"\binvoice\b", re.IGNORECASE), "Invoice"),
]

# ---------------------------------------------------------------------------
# Contract / agreement / reference numbers (first match wins)
# ---------------------------------------------------------------------------

CONTRACT_NUMBER_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"contract[ \t]*(?:number|#|no\.?)?[ \t]*:?[ \t]*([A-Z]{1,4}-?\d{4}-?\d{0,4}[A-Z0-9\-]*)",
        re.IGNORECASE,
    ),
    re.compile(
        r"agreement[ \t]*(?:number|#|no\.?)[ \t]*:?[ \t]*([A-Z0-9][A-Z0-9\-]*)",
        re.IGNORECASE,
    ),
    re.compile(
        r"invoice[ \t]*(?:number|#|no\.?)[ \t]*:?[ \t]*([A-Z0-9][A-Z0-9\-]*)",
        re.IGNORECASE,
    ),
    re.compile(
        r"reference[ \t]*(?:number|#|no\.?)?[ \t]*:?[ \t]*([A-Z0-9\-]*\d[A-Z0-9\-]*)",
        re.IGNORECASE,
    ),
    # Bare structured codes
    re.compile(r"\b(CON\d+|AGR\d+|REF\d+[A-Z0-9\-]*|SA-\d{4}-\d{3})\b", re.IGNORECASE),
]

# ---------------------------------------------------------------------------
# Total value labels (first match wins) and free-standing currency amounts
# ---------------------------------------------------------------------------

TOTAL_VALUE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(rf"total\s*(?:amount|value|price|cost|fee)\s*:?\s*\$?\s*{AMOUNT}", re.IGNORECASE),
    re.compile(rf"contract\s*(?:value|price|amount)\s*:?\s*\$?\s*{AMOUNT}", re.IGNORECASE),
    re.compile(rf"aggregate\s*(?:amount|value)\s*:?\s*\$?\s*{AMOUNT}", re.IGNORECASE),
    re.compile(rf"\b(?:value|amount)\s*:?\s*\$?\s*{AMOUNT}", re.IGNORECASE),
]

MONEY_PATTERNS: list[re.Pattern[str]] = [
    re.compile(rf"\$\s*{AMOUNT}"),
    re.compile(rf"AUD\s*{AMOUNT}", re.IGNORECASE),
    re.compile(rf"{AMOUNT}\s*(?:dollars|AUD)\b", re.IGNORECASE),
]

DOLLAR_AMOUNT = re.compile(rf"\$\s*{AMOUNT}")
PERCENTAGE = re.compile(r"(?<![\d.])(\d{1,3}(?:\.\d+)?)\s*%")

# ---------------------------------------------------------------------------
# Dates, in the order they are tried. The format tag drives normalization.
# ---------------------------------------------------------------------------

DATE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})\b"), "dmy"),
    (re.compile(r"\b(\d{4})[/\-.](\d{1,2})[/\-.](\d{1,2})\b"), "ymd"),
    (
        re.compile(
            r"\b(\d{1,2})\s+(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\s+(\d{4})\b",
            re.IGNORECASE,
        ),
        "dmy_text",
    ),
]

# ---------------------------------------------------------------------------
# Parties and identifiers
# ---------------------------------------------------------------------------

# keyword -> role; table order is the order lines are tested against
PARTY_ROLES: dict[str, str] = {
    "client": "client",
    "customer": "client",
    "purchaser": "client",
    "buyer": "client",
    "employer": "client",
    "landlord": "client",
    "lessor": "client",
    "contractor": "contractor",
    "consultant": "contractor",
    "provider": "contractor",
    "employee": "contractor",
    "supplier": "vendor",
    "vendor": "vendor",
    "tenant": "other",
    "lessee": "other",
}

PARTY_LINE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"^\s*{keyword}\b\s*:\s*(\S.*)$", re.IGNORECASE), keyword)
    for keyword in PARTY_ROLES
]

# Inline "(ABN: ...)" / "(ACN: ...)" annotations trimmed from party names
PARTY_NAME_ANNOTATION = re.compile(r"\s*\((?:ABN|ACN)\b[^)]*\)", re.IGNORECASE)

ABN_PATTERN = re.compile(r"\b\d{2}\s?\d{3}\s?\d{3}\s?\d{3}\b")
ACN_PATTERN = re.compile(r"\b\d{3}\s?\d{3}\s?\d{3}\b")

PARTY_CONTEXT_LINES = 3

# ---------------------------------------------------------------------------
# Key dates: keyword -> date type
# ---------------------------------------------------------------------------

KEY_DATE_KEYWORDS: list[tuple[str, str]] = [
    ("commencement", "commencement"),
    ("start date", "commencement"),
    ("effective date", "commencement"),
    ("completion", "completion"),
    ("expiry", "completion"),
    ("termination", "termination"),
    ("milestone", "milestone"),
    ("review", "review"),
    ("renewal", "review"),
]

# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------

PAYMENT_LINE = re.compile(r"payment|milestone|installment|instalment|deposit|balance", re.IGNORECASE)
MILESTONE_LINE = re.compile(r"milestone|stage|phase", re.IGNORECASE)

# ---------------------------------------------------------------------------
# Depreciation
# ---------------------------------------------------------------------------

DEPRECIATION_KEYWORDS: tuple[str, ...] = (
    "equipment", "machinery", "furniture", "computer", "laptop", "software",
    "vehicle", "plant", "tools", "hardware", "device",
    "depreciat", "effective life", "prime cost", "diminishing value",
)

EFFECTIVE_LIFE = re.compile(r"(\d+)\s*(?:year|yr)s?\b", re.IGNORECASE)

# phrase -> method, checked in order
DEPRECIATION_METHODS: list[tuple[str, str]] = [
    ("diminishing value", "diminishing_value"),
    ("prime cost", "prime_cost"),
    ("straight line", "prime_cost"),
]

DEPRECIATION_LOOKAHEAD_LINES = 2

# ---------------------------------------------------------------------------
# Clauses
# ---------------------------------------------------------------------------

CLAUSE_HEADER_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"^(\d+\.\d+|\d+|\([a-z]\))[:.)]?\s+(.+)$", re.IGNORECASE),
    re.compile(r"^clause\s+(\d+\.?\d*)\s*:?\s*(.+)$", re.IGNORECASE),
    re.compile(r"^([\d.]+)\s+([A-Za-z].*)$"),
]

CLAUSE_CATEGORIES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"payment|fee|price|cost|invoice|billing", re.IGNORECASE), "payment"),
    (re.compile(r"terminat|cancel|breach|default", re.IGNORECASE), "termination"),
    (re.compile(r"liability|indemn|insurance|warrant", re.IGNORECASE), "liability"),
    (
        re.compile(r"intellectual|copyright|trademark|patent|\bip\b|licen[cs]e", re.IGNORECASE),
        "intellectual_property",
    ),
]

# ---------------------------------------------------------------------------
# Classifier: keywords per document type
# ---------------------------------------------------------------------------

KEYWORD_PATTERNS: dict[str, list[str]] = {
    "receipt": [
        "receipt", "tax invoice", "invoice no", "abn", "acn",
        "total", "subtotal", "gst", "payment", "change",
        "cash", "card", "eftpos", "tap", "pin",
        "thank you", "thanks for your business", "come again",
        "item", "qty", "quantity", "price", "each",
        "register", "terminal", "store", "shop",
    ],
    "bank_statement": [
        "statement", "account statement", "bank statement",
        "opening balance", "closing balance", "balance brought forward",
        "transaction", "debit", "credit", "transfer",
        "account number", "bsb", "sort code",
        "commonwealth bank", "commbank", "nab", "westpac", "anz", "ing",
        "period", "from", "to", "date range",
        "withdrawal", "deposit", "direct debit", "direct credit",
    ],
    "dividend_statement": [
        "dividend", "dividend statement", "distribution",
        "franked", "unfranked", "franking credits",
        "shareholder", "shares", "holdings", "securities",
        "drp", "dr", "dividend reinvestment plan",
        "payment date", "record date", "ex-dividend",
        "company", "corporation", "limited", "ltd",
        "asx", "share registry", "link market", "computershare",
    ],
    "invoice": [
        "invoice", "tax invoice", "commercial invoice",
        "bill to", "ship to", "sold to", "customer",
        "payment terms", "due date", "net 30", "net 14",
        "purchase order", "po number", "quote",
        "description", "line item", "unit price", "amount",
        "subtotal", "tax", "total", "balance due",
        "please pay", "payment instructions", "bank transfer",
    ],
    "contract": [
        "contract", "agreement", "terms and conditions",
        "party", "parties", "hereby", "herein", "whereas",
        "obligation", "liability", "indemnity", "warranty",
        "termination", "breach", "governing law",
        "signature", "signed", "date signed", "witness",
        "effective date", "commencement", "duration",
        "clause", "section", "article", "schedule",
    ],
}

# High-weight phrases, written in normalized form (lower case, no ':' or '#')
UNIQUE_IDENTIFIERS: dict[str, list[str]] = {
    "receipt": ["receipt no", "receipt number", "tax invoice"],
    "bank_statement": ["bank statement", "account statement", "opening balance", "bsb"],
    "dividend_statement": ["dividend statement", "franking credits", "drp", "share registry"],
    "invoice": ["invoice no", "invoice number", "payment terms"],
    "contract": ["this agreement", "terms and conditions", "party of the first part"],
}

KEYWORD_REGEXES: dict[str, list[tuple[str, re.Pattern[str]]]] = {
    doc_type: [(kw, re.compile(rf"\b{re.escape(kw)}\b")) for kw in keywords]
    for doc_type, keywords in KEYWORD_PATTERNS.items()
}

# ---------------------------------------------------------------------------
# Classifier: structural signals and rules
# ---------------------------------------------------------------------------

TABLE_BORDER = re.compile(r"\|\s*-+\s*\||\+[=-]+\+")
TABLE_PIPE_ROW = re.compile(r"\|.*\|")
TABLE_COLUMN_ROW = re.compile(r"\S(?:\s{2,}|\t)\S+(?:\s{2,}|\t)\S")
MIN_TABLE_ROWS = 2

HAS_AMOUNTS = re.compile(r"\$[\d,]+\.?\d*|\d+\.\d{2}")
HAS_DATES = re.compile(r"\d{1,2}[/.\-]\d{1,2}[/.\-]\d{2,4}|\d{4}[/.\-]\d{1,2}[/.\-]\d{1,2}")
HAS_ABN = re.compile(r"\b\d{2}\s*\d{3}\s*\d{3}\s*\d{3}\b|\babn\b", re.IGNORECASE)


@dataclass(frozen=True)
class StructureRule:
    """Award `points` to `doc_type` when every condition holds.

    Signals are the boolean DocumentMetadata flags (has_tables, ...).
    Phrases are substrings of the normalized text.
    """
    doc_type: str
    points: int
    signals: tuple[str, ...] = ()
    absent_signals: tuple[str, ...] = ()
    any_phrases: tuple[str, ...] = ()
    all_phrases: tuple[str, ...] = ()
    min_page_count: Optional[int] = None


STRUCTURE_RULES: list[StructureRule] = [
    StructureRule("receipt", 3, signals=("has_amounts", "has_dates"), absent_signals=("has_tables",)),
    StructureRule("receipt", 2, all_phrases=("total", "gst")),
    StructureRule("bank_statement", 4, signals=("has_tables",), all_phrases=("balance",)),
    StructureRule("bank_statement", 2, all_phrases=("transaction", "debit")),
    StructureRule("dividend_statement", 5, any_phrases=("franked", "franking")),
    StructureRule("dividend_statement", 2, signals=("has_tables",), all_phrases=("shares",)),
    StructureRule("invoice", 4, any_phrases=("payment terms", "due date")),
    StructureRule("invoice", 2, signals=("has_tables", "has_abn")),
    StructureRule("contract", 3, any_phrases=("signature", "agreement")),
    StructureRule("contract", 2, min_page_count=3),
]
