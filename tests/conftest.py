"""Shared pytest fixtures."""

import pytest

from bootstrap4_forms.config import FormSettings, clear_settings_cache
from bootstrap4_forms.service import FormService


@pytest.fixture(autouse=True)
def clean_settings_cache():
    """Ensure cached settings never leak between tests."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def settings():
    return FormSettings()


@pytest.fixture
def form(settings):
    """A form builder with default settings and no collaborators."""
    return FormService(settings=settings)


@pytest.fixture
def form_factory(settings):
    """Factory fixture for builders wired to custom collaborators."""
    def _make(**kwargs):
        kwargs.setdefault("settings", settings)
        return FormService(**kwargs)
    return _make
