"""Unit tests for the template quality review."""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.strategies.moderation.review import is_valid_price, review_template_quality

BODY = (
    "İşbu sözleşme {tenant} ile ev sahibi arasında {start_date} tarihinde "
    "aylık {rent} TL kira bedeli üzerinden imzalanmıştır."
)
PLACEHOLDERS = {
    "tenant": {"type": "string", "label": "Kiracı", "required": True, "order": 0},
    "start_date": {"type": "date", "label": "Başlangıç", "required": True, "order": 1},
    "rent": {"type": "number", "label": "Kira", "required": True, "order": 2},
}


def _template(**overrides):
    fields = {
        "title": "Konut Kira Sözleşmesi",
        "description": "Türk Borçlar Kanunu'na uygun standart konut kira sözleşmesi.",
        "body": BODY,
        "price": Decimal("49.90"),
        "placeholders": PLACEHOLDERS,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestReviewTemplateQuality:
    """Test suite for review_template_quality."""

    def test_good_template(self):
        report = review_template_quality(_template())

        assert report.is_valid
        assert report.issues == []
        assert report.warnings == []

    @pytest.mark.parametrize("title", ["Kira", "x" * 101, "   "])
    def test_title_length(self, title):
        report = review_template_quality(_template(title=title))

        assert not report.is_valid
        assert report.issues == ["Title must be between 5 and 100 characters"]

    def test_short_description(self):
        report = review_template_quality(_template(description="Kısa"))

        assert report.issues == ["Description must be at least 20 characters"]

    def test_long_description_is_a_warning(self):
        report = review_template_quality(_template(description="a" * 1001))

        assert report.is_valid
        assert report.warnings == ["Description is very long and may overwhelm buyers"]

    def test_short_body(self):
        report = review_template_quality(_template(body="Kısa metin", placeholders={}))

        assert "Template content must be at least 50 characters" in report.issues

    @pytest.mark.parametrize("snippet", ["<script>alert(1)</script>", '<a href="JavaScript:void(0)">x</a>'])
    def test_unsafe_content(self, snippet):
        report = review_template_quality(_template(body=BODY + snippet))

        assert report.issues == ["Template content contains potentially unsafe code"]

    def test_invalid_price(self):
        report = review_template_quality(_template(price=Decimal("3")))

        assert report.issues == ["Price must be 0 (free) or between 5 and 500"]

    def test_structure_errors_are_issues(self):
        placeholders = {k: v for k, v in PLACEHOLDERS.items() if k != "rent"}

        report = review_template_quality(_template(placeholders=placeholders))

        assert report.issues == [
            "Placeholder '{rent}' used in body but not defined in placeholders"
        ]

    def test_no_placeholders_is_a_warning(self):
        body = "Bu şablon hiçbir değişken içermeyen, sabit bir bilgilendirme metnidir."

        report = review_template_quality(_template(body=body, placeholders={}))

        assert report.is_valid
        assert report.warnings == ["Template has no placeholders; buyers cannot customize it"]


class TestIsValidPrice:
    """Test suite for the price rule."""

    @pytest.mark.parametrize("price", [0, "0.00", 5, Decimal("250.50"), 500])
    def test_valid(self, price):
        assert is_valid_price(price)

    @pytest.mark.parametrize("price", [-1, "4.99", Decimal("500.01"), "free"])
    def test_invalid(self, price):
        assert not is_valid_price(price)
