"""Shared fixtures."""

import pytest

from taxdocs.config import get_settings
from taxdocs.middleware.rate_limit import get_limiter

SERVICE_AGREEMENT = """SERVICE AGREEMENT
Contract Number: SA-2024-001
Total Contract Value: $25,000.00
Client: ABC Pty Ltd
Contractor: XYZ Consulting
"""

SIGNED_AGREEMENT = """SERVICE AGREEMENT
This Agreement is made between the parties.
Contract Number: SA-2024-001
Total Contract Value: $25,000.00
Client: ABC Pty Ltd
Contractor: XYZ Consulting
Commencement Date: 01/07/2024
Termination of this agreement requires 30 days notice.
Signature: ________
"""

DIVIDEND_STATEMENT = """DIVIDEND STATEMENT
Computershare Investor Services
Payment date: 15/03/2024   Record date: 20/02/2024
Class        Shares      Franked amount    Franking credits
Ordinary     1,000       $500.00           $214.29
"""


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests that set env vars need a fresh load."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    get_limiter().reset()


@pytest.fixture
def service_agreement() -> str:
    return SERVICE_AGREEMENT


@pytest.fixture
def signed_agreement() -> str:
    return SIGNED_AGREEMENT


@pytest.fixture
def dividend_statement() -> str:
    return DIVIDEND_STATEMENT
