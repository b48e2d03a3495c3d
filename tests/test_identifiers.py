"""Tests for ABN and ACN checksum validation."""

import pytest

from taxdocs.services.identifiers import validate_abn, validate_acn


class TestValidateABN:
    @pytest.mark.parametrize("abn", ["51824753556", "51 824 753 556", "53 004 085 616"])
    def test_valid(self, abn):
        assert validate_abn(abn) is True

    @pytest.mark.parametrize("abn", [
        "12345678901",      # bad checksum
        "5182475355",       # 10 digits
        "518247535561",     # 12 digits
        "5182475355a",      # non-digit
        "",
        "51-824-753-556",   # hyphens are not whitespace
    ])
    def test_invalid(self, abn):
        assert validate_abn(abn) is False

    def test_none_is_invalid(self):
        assert validate_abn(None) is False

    def test_deterministic(self):
        assert [validate_abn("51824753556") for _ in range(3)] == [True, True, True]


class TestValidateACN:
    @pytest.mark.parametrize("acn", ["005749986", "005 749 986", "004 085 616"])
    def test_valid(self, acn):
        assert validate_acn(acn) is True

    @pytest.mark.parametrize("acn", ["123456789", "00574998", "0057499860", "00574998x", ""])
    def test_invalid(self, acn):
        assert validate_acn(acn) is False

    def test_unicode_digits_rejected(self):
        assert validate_acn("００５749986") is False
