"""Bootstrap 4 markup rendering for a single FieldState."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

from markupsafe import Markup, escape as markup_escape

from bootstrap4_forms.config import FormSettings, get_settings
from bootstrap4_forms.html import Escaper, class_names, render_attrs
from bootstrap4_forms.state import FieldState, Option, OptionEntry, OptionGroup

logger = logging.getLogger(__name__)

Translator = Callable[[str], str]
TokenProvider = Callable[[], "str | None"]

# Methods a browser can submit natively; anything else is spoofed through a hidden field
NATIVE_METHODS = ("get", "post")


class RenderKind(str, Enum):
    OPEN = "open"
    CLOSE = "close"
    FIELDSET_OPEN = "fieldset_open"
    FIELDSET_CLOSE = "fieldset_close"
    FILE = "file"
    TEXT = "text"
    PASSWORD = "password"
    EMAIL = "email"
    NUMBER = "number"
    HIDDEN = "hidden"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    TEXTAREA = "textarea"
    BUTTON = "button"
    SUBMIT = "submit"
    RESET = "reset"
    ANCHOR = "anchor"

    @classmethod
    def parse(cls, kind: Any) -> RenderKind | None:
        """Return the matching kind, or None for anything unknown."""
        try:
            return cls(kind)
        except ValueError:
            return None


def _identity(key: str) -> str:
    return key


class FormBuilder:
    """Render Bootstrap 4 form fragments from a FieldState.

    Rendering is pure: it reads the state and the collaborators and never
    mutates anything.

    Args:
        state: The attributes to render. A fresh FieldState when omitted.
        settings: Defaults for method, button color, id prefix and locale.
        translate: Looks up "<locale>.<text>" keys when a locale is set.
        escape: HTML escaping for every piece of user supplied text.
        csrf_token: Returns the token embedded into non-GET forms, or None.
    """

    def __init__(
        self,
        state: FieldState | None = None,
        *,
        settings: FormSettings | None = None,
        translate: Translator | None = None,
        escape: Escaper | None = None,
        csrf_token: TokenProvider | None = None,
    ):
        self.state = state if state is not None else FieldState()
        self.settings = settings or get_settings()
        self._translate = translate or _identity
        self._escape = escape or markup_escape
        self._csrf_token = csrf_token

        self._renderers: dict[RenderKind, Callable[[], str]] = {
            RenderKind.OPEN: self._render_open,
            RenderKind.CLOSE: self._render_close,
            RenderKind.FIELDSET_OPEN: self._render_fieldset_open,
            RenderKind.FIELDSET_CLOSE: self._render_fieldset_close,
            RenderKind.FILE: self._render_input,
            RenderKind.TEXT: self._render_input,
            RenderKind.PASSWORD: self._render_input,
            RenderKind.EMAIL: self._render_input,
            RenderKind.NUMBER: self._render_input,
            RenderKind.HIDDEN: self._render_hidden,
            RenderKind.SELECT: self._render_select,
            RenderKind.CHECKBOX: self._render_check,
            RenderKind.RADIO: self._render_check,
            RenderKind.TEXTAREA: self._render_textarea,
            RenderKind.BUTTON: self._render_button,
            RenderKind.SUBMIT: self._render_button,
            RenderKind.RESET: self._render_button,
            RenderKind.ANCHOR: self._render_anchor,
        }

    # -- State access --

    def get(self, attr: str, default: Any = None) -> Any:
        return self.state.get(attr, default)

    def set(self, attr: str, value: Any) -> None:
        self.state.set(attr, value)

    # -- Rendering --

    def render(self, kind: RenderKind | str | None) -> Markup:
        """Render the fragment for *kind*. Unknown kinds render nothing."""
        render_kind = RenderKind.parse(kind)
        if render_kind is None:
            logger.debug("No renderer for kind %r", kind)
            return Markup("")
        return Markup(self._renderers[render_kind]())

    def _render_open(self) -> str:
        state = self.state
        method = (state.method or self.settings.default_method).lower()
        form_method = "get" if method == "get" else "post"

        attrs = self._merge_attrs({
            "method": form_method,
            "action": state.url,
            "enctype": "multipart/form-data" if state.multipart else None,
            "class": "form-inline" if state.check_inline_form else None,
        })
        html = f"<form{render_attrs(attrs, self._escape)}>"

        if method not in NATIVE_METHODS:
            html += self._hidden_input(self.settings.method_field_name, method.upper())

        if form_method != "get" and self._csrf_token is not None:
            token = self._csrf_token()
            if token:
                html += self._hidden_input(self.settings.csrf_field_name, token)

        return html

    def _render_close(self) -> str:
        return "</form>"

    def _render_fieldset_open(self) -> str:
        html = f"<fieldset{render_attrs(self.state.attrs, self._escape)}>"
        legend = self._text(self.state.meta.get("legend"))
        if legend:
            html += f"<legend>{self._escape(legend)}</legend>"
        return html

    def _render_fieldset_close(self) -> str:
        return "</fieldset>"

    def _render_input(self) -> str:
        state = self.state
        if state.type == RenderKind.FILE.value:
            css = "form-control-file"
            value = None
        else:
            css = class_names("form-control", self._size_class("form-control"))
            value = self._attr_value(self._field_value())

        field_id = self._field_id()
        attrs = self._merge_attrs({
            "type": state.type,
            "name": state.name,
            "value": value,
            "class": class_names(css, self._invalid_class()),
            "id": field_id,
            "placeholder": self._text(state.placeholder),
            "readonly": state.readonly,
            "disabled": state.disabled,
        })
        control = f"<input{render_attrs(attrs, self._escape)}>"
        return self._form_group(self._label_tag(field_id) + control + self._feedback() + self._help_text())

    def _render_hidden(self) -> str:
        attrs = self._merge_attrs({
            "type": "hidden",
            "name": self.state.name,
            "value": self._attr_value(self._field_value()),
            "id": self.state.id,
        })
        return f"<input{render_attrs(attrs, self._escape)}>"

    def _render_select(self) -> str:
        state = self.state
        selected = self._selected_values()
        field_id = self._field_id()

        attrs = self._merge_attrs({
            "name": state.name,
            "class": class_names("form-control", self._size_class("form-control"), self._invalid_class()),
            "id": field_id,
            "multiple": state.multiple,
            "disabled": state.disabled,
        })
        options = "".join(self._render_option_entry(entry, selected) for entry in state.options)
        control = f"<select{render_attrs(attrs, self._escape)}>{options}</select>"
        return self._form_group(self._label_tag(field_id) + control + self._feedback() + self._help_text())

    def _render_option_entry(self, entry: OptionEntry, selected: set[str]) -> str:
        if isinstance(entry, OptionGroup):
            inner = "".join(self._render_option(option, selected) for option in entry.options)
            return f'<optgroup label="{self._escape(str(entry.label))}">{inner}</optgroup>'
        return self._render_option(entry, selected)

    def _render_option(self, option: Option, selected: set[str]) -> str:
        is_selected = " selected" if str(option.value) in selected else ""
        return (
            f'<option value="{self._escape(str(option.value))}"{is_selected}>'
            f"{self._escape(str(option.label))}</option>"
        )

    def _render_check(self) -> str:
        state = self.state
        submitted = state.meta.get("value")
        field_id = self._field_id()
        if field_id and state.type == RenderKind.RADIO.value and not state.id and submitted is not None:
            field_id = f"{field_id}-{submitted}"

        attrs = self._merge_attrs({
            "type": state.type,
            "class": class_names("form-check-input", self._invalid_class()),
            "id": field_id,
            "name": state.name,
            "value": submitted,
            "checked": self._is_checked(submitted),
            "readonly": state.readonly,
            "disabled": state.disabled,
        })
        html = f"<input{render_attrs(attrs, self._escape)}>"

        label = self._text(state.label)
        if label:
            label_attrs = {"class": "form-check-label", "for": field_id}
            html += f"<label{render_attrs(label_attrs, self._escape)}>{self._escape(label)}</label>"

        wrapper = class_names(
            "form-check",
            "form-check-inline" if state.check_inline else None,
            "mb-2 mr-sm-2" if state.check_inline_form else None,
        )
        return f'<div class="{wrapper}">{html}{self._feedback()}{self._help_text()}</div>'

    def _render_textarea(self) -> str:
        state = self.state
        field_id = self._field_id()
        value = self._field_value()

        attrs = self._merge_attrs({
            "name": state.name,
            "class": class_names("form-control", self._size_class("form-control"), self._invalid_class()),
            "id": field_id,
            "rows": self.settings.textarea_rows,
            "placeholder": self._text(state.placeholder),
            "readonly": state.readonly,
            "disabled": state.disabled,
        })
        body = "" if value is None else self._escape(str(value))
        control = f"<textarea{render_attrs(attrs, self._escape)}>{body}</textarea>"
        return self._form_group(self._label_tag(field_id) + control + self._feedback() + self._help_text())

    def _render_button(self) -> str:
        state = self.state
        attrs = self._merge_attrs({
            "type": state.type,
            "class": self._button_class(),
            "id": state.id,
            "name": state.name,
            "disabled": state.disabled,
        })
        text = self._text(state.value)
        body = "" if text is None else self._escape(str(text))
        return f"<button{render_attrs(attrs, self._escape)}>{body}</button>"

    def _render_anchor(self) -> str:
        state = self.state
        attrs = self._merge_attrs({
            "href": state.url,
            "class": class_names(self._button_class(), "disabled" if state.disabled else None),
            "id": state.id,
            "role": "button",
            "aria-disabled": "true" if state.disabled else None,
        })
        text = self._text(state.value)
        body = "" if text is None else self._escape(str(text))
        return f"<a{render_attrs(attrs, self._escape)}>{body}</a>"

    # -- Pieces --

    def _form_group(self, inner: str) -> str:
        css = class_names("form-group", "mb-2 mr-sm-2" if self.state.check_inline_form else None)
        return f'<div class="{css}">{inner}</div>'

    def _label_tag(self, field_id: str | None) -> str:
        label = self._text(self.state.label)
        if not label:
            return ""
        return f"<label{render_attrs({'for': field_id}, self._escape)}>{self._escape(label)}</label>"

    def _help_text(self) -> str:
        text = self._text(self.state.help)
        if not text:
            return ""
        return f'<small class="form-text text-muted">{self._escape(text)}</small>'

    def _feedback(self) -> str:
        error = self._error()
        if not error:
            return ""
        return f'<div class="invalid-feedback">{self._escape(str(error))}</div>'

    def _hidden_input(self, name: str, value: str) -> str:
        return f'<input type="hidden" name="{self._escape(name)}" value="{self._escape(value)}">'

    def _button_class(self) -> str:
        state = self.state
        color = state.color or self.settings.default_button_color
        prefix = "btn-outline-" if state.outline else "btn-"
        return class_names(
            "btn",
            f"{prefix}{color}",
            self._size_class("btn"),
            "btn-block" if state.block else None,
        )

    def _size_class(self, base: str) -> str | None:
        return f"{base}-{self.state.size}" if self.state.size else None

    def _invalid_class(self) -> str | None:
        return "is-invalid" if self._error() else None

    def _merge_attrs(self, base: dict) -> dict:
        """Combine generated attributes with user attrs; user classes are appended."""
        extra = dict(self.state.attrs)
        extra_classes = [extra.pop(key) for key in ("class", "class_") if key in extra]
        merged = {**base, **extra}
        if extra_classes:
            merged["class"] = class_names(base.get("class"), *extra_classes)
        return merged

    # -- Resolution --

    def _text(self, text: Any) -> Any:
        """Translate user facing text through the active locale, if any."""
        if text is None or text == "" or isinstance(text, bool):
            return text
        locale = self.state.locale or self.settings.locale
        if not locale:
            return text
        return self._translate(f"{locale}.{text}")

    def _field_id(self) -> str | None:
        if self.state.id:
            return self.state.id
        if not self.state.name:
            return None
        return f"{self.state.id_prefix or self.settings.id_prefix}{self.state.name}"

    def _field_value(self) -> Any:
        state = self.state
        if state.value is not None:
            return state.value
        if state.type == RenderKind.PASSWORD.value or not state.name:
            return None
        return state.data.get(state.name)

    @staticmethod
    def _attr_value(value: Any) -> str | None:
        """Stringify a field value so booleans are not taken for HTML flags."""
        return None if value is None else str(value)

    def _selected_values(self) -> set[str]:
        value = self._field_value()
        if value is None:
            return set()
        if isinstance(value, (list, tuple, set, frozenset)):
            return {str(item) for item in value}
        return {str(value)}

    def _is_checked(self, submitted: Any) -> bool:
        value = self.state.value
        if isinstance(value, bool):
            return value
        if value is not None:
            return str(value) == str(submitted)

        filled = self.state.data.get(self.state.name) if self.state.name else None
        if filled is None or submitted is None:
            return False
        if isinstance(filled, bool):
            return filled
        if isinstance(filled, (list, tuple, set, frozenset)):
            return str(submitted) in {str(item) for item in filled}
        return str(filled) == str(submitted)

    def _error(self) -> Any:
        if not self.state.name:
            return None
        error = self.state.errors.get(self.state.name)
        if isinstance(error, (list, tuple)):
            return error[0] if error else None
        return error
