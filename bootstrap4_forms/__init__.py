"""Bootstrap 4 form markup through a fluent builder."""

from bootstrap4_forms.builder import FormBuilder, RenderKind
from bootstrap4_forms.config import FormSettings, get_settings
from bootstrap4_forms.service import FormService
from bootstrap4_forms.state import FieldState, Option, OptionGroup

__all__ = [
    "FieldState",
    "FormBuilder",
    "FormService",
    "FormSettings",
    "Option",
    "OptionGroup",
    "RenderKind",
    "get_settings",
]
