"""Shared fixtures for unit tests."""

from types import SimpleNamespace

import pytest


@pytest.fixture
def make_template():
    """Build a minimal object exposing the attributes the template engine reads."""

    def factory(body: str, placeholders: dict, title: str = "Sözleşme", template_id: str = "tpl-1"):
        return SimpleNamespace(id=template_id, title=title, body=body, placeholders=placeholders)

    return factory


@pytest.fixture
def invoice_placeholders():
    """Placeholder schema with one required text field and one required number."""
    return {
        "name": {"type": "string", "label": "Ad Soyad", "required": True, "order": 0},
        "amount": {"type": "number", "label": "Tutar", "required": True, "order": 1},
    }
