"""Fluent facade that accumulates field configuration and renders it on demand."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from markupsafe import Markup
from pydantic import TypeAdapter

from bootstrap4_forms.builder import FormBuilder, RenderKind, TokenProvider, Translator
from bootstrap4_forms.config import FormSettings, get_settings
from bootstrap4_forms.html import Escaper
from bootstrap4_forms.state import FieldState, normalize_data, normalize_options

UrlGenerator = Callable[[str, dict], str]

_OPTIONAL_STR = TypeAdapter(str | None)
_STR = TypeAdapter(str)
_BOOL = TypeAdapter(bool)
_ATTRS = TypeAdapter(dict[str, Any] | None)

# Argument types accepted by the typed setters; a mismatch raises ValidationError
_VALIDATORS: dict[str, TypeAdapter] = {
    "type": _OPTIONAL_STR,
    "name": _OPTIONAL_STR,
    "label": _OPTIONAL_STR,
    "id": _OPTIONAL_STR,
    "size": _OPTIONAL_STR,
    "color": _OPTIONAL_STR,
    "help": _STR,
    "placeholder": _OPTIONAL_STR,
    "url": _STR,
    "method": _STR,
    "id_prefix": _STR,
    "locale": _STR,
    "attrs": _ATTRS,
    "multipart": _BOOL,
    "outline": _BOOL,
    "block": _BOOL,
    "readonly": _BOOL,
    "disabled": _BOOL,
    "multiple": _BOOL,
    "check_inline": _BOOL,
    "check_inline_form": _BOOL,
}


def _identity(path: str) -> str:
    return path


class FormService:
    """Chainable Bootstrap 4 form builder.

    Every setter returns the same instance. Nothing is rendered until the
    service is converted to text (``str()``, ``render()`` or Jinja output):

        form = FormService()
        str(form.open().post().route("contact"))
        str(form.text("email", "Email").placeholder("you@example.com"))
        str(form.submit("Send"))
        str(form.close())

    Field attributes are cleared after each render; form level attributes
    (fill data, id prefix, locale, errors, inline form) last until ``close()``.

    Malformed ``fill()`` and ``options()`` input degrades to safe defaults.
    Other setters raise ``pydantic.ValidationError`` on a wrong argument type.
    """

    def __init__(
        self,
        *,
        settings: FormSettings | None = None,
        url_for: UrlGenerator | None = None,
        absolute_url: Callable[[str], str] | None = None,
        translate: Translator | None = None,
        escape: Escaper | None = None,
        csrf_token: TokenProvider | None = None,
    ):
        self.settings = settings or get_settings()
        self._url_for = url_for
        self._absolute_url = absolute_url or _identity
        self._builder = FormBuilder(
            settings=self.settings,
            translate=translate,
            escape=escape,
            csrf_token=csrf_token,
        )
        self._render: RenderKind | str | None = None

    @property
    def state(self) -> FieldState:
        """Attributes accumulated since the last render."""
        return self._builder.state

    # -- Rendering --

    def render(self) -> Markup:
        """Render the pending kind and clear it along with the field state."""
        kind = self._render
        output = self._builder.render(kind) if kind is not None else Markup("")
        self._render = None

        if RenderKind.parse(kind) is RenderKind.CLOSE:
            self._builder.state.reset()
        else:
            self._builder.state.reset_field()
        return output

    def __str__(self) -> str:
        return str(self.render())

    def __html__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        state = self._builder.state
        return f"FormService(pending={self._render!r}, type={state.type!r}, name={state.name!r})"

    def render_as(self, kind: RenderKind | str) -> FormService:
        """Set the fragment rendered on the next conversion to text."""
        self._render = kind
        return self

    # -- Form --

    def open(self) -> FormService:
        return self.render_as(RenderKind.OPEN)

    def close(self) -> FormService:
        return self.render_as(RenderKind.CLOSE)

    def id_prefix(self, prefix: str = "") -> FormService:
        """Prefix generated ids for every field of the form."""
        return self._set("id_prefix", prefix)

    def multipart(self, multipart: bool = True) -> FormService:
        return self._set("multipart", multipart)

    def method(self, method: str) -> FormService:
        return self._set("method", method)

    def get(self) -> FormService:
        return self.method("get")

    def post(self) -> FormService:
        return self.method("post")

    def put(self) -> FormService:
        return self.method("put")

    def patch(self) -> FormService:
        return self.method("patch")

    def delete(self) -> FormService:
        return self.method("delete")

    def fill(self, data: Any) -> FormService:
        """Bind values for the form's fields.

        Accepts a mapping, a pydantic model, an object with ``to_dict()`` or
        a dataclass instance. Anything else binds an empty data set.
        """
        return self._set("data", normalize_data(data))

    def errors(self, errors: Any) -> FormService:
        """Bind validation messages keyed by field name."""
        return self._set("errors", normalize_data(errors, "validation errors"))

    def locale(self, path: str) -> FormService:
        """Translate labels, placeholders and help texts under *path*."""
        return self._set("locale", path)

    def inline(self, inline: bool = True) -> FormService:
        """Lay checkbox and radio inputs out inline."""
        return self._set("check_inline", inline)

    def inline_form(self, inline: bool = True) -> FormService:
        return self._set("check_inline_form", inline)

    def url(self, url: str) -> FormService:
        return self._set("url", self._absolute_url(_STR.validate_python(url)))

    def route(self, route: str, params: Mapping[str, Any] | None = None) -> FormService:
        """Resolve a named route into the form action or anchor href."""
        if self._url_for is None:
            raise LookupError(f"Cannot resolve route '{route}': no URL generator configured")
        return self._set("url", self._url_for(_STR.validate_python(route), dict(params or {})))

    def fieldset_open(self, legend: str | None = None) -> FormService:
        self._set("meta", {"legend": _OPTIONAL_STR.validate_python(legend)})
        return self.render_as(RenderKind.FIELDSET_OPEN)

    def fieldset_close(self) -> FormService:
        return self.render_as(RenderKind.FIELDSET_CLOSE)

    def help(self, text: str) -> FormService:
        return self._set("help", text)

    # -- Fields --

    def file(self, name: str | None = None, label: str | None = None) -> FormService:
        return self.name(name).label(label).type("file")

    def text(self, name: str | None = None, label: str | None = None, default: str | None = None) -> FormService:
        return self._input("text", name, label, default)

    def password(self, name: str | None = None, label: str | None = None) -> FormService:
        return self._input("password", name, label, None)

    def email(self, name: str | None = None, label: str | None = None, default: str | None = None) -> FormService:
        return self._input("email", name, label, default)

    def number(self, name: str | None = None, label: str | None = None, default: Any = None) -> FormService:
        return self._input("number", name, label, default)

    def hidden(self, name: str | None = None, default: Any = None) -> FormService:
        return self.name(name).value(default).type("hidden")

    def select(
        self,
        name: str | None = None,
        label: str | None = None,
        options: Any = (),
        default: Any = None,
    ) -> FormService:
        return self.name(name).label(label).options(options).value(default).type("select")

    def options(self, options: Any = ()) -> FormService:
        """Set select options. Non-iterable input becomes a single placeholder option."""
        return self._set("options", normalize_options(options))

    def checkbox(
        self,
        name: str | None = None,
        label: str | None = None,
        value: str | None = None,
        default: Any = None,
    ) -> FormService:
        return self._checkbox_radio("checkbox", name, label, value, default)

    def radio(
        self,
        name: str | None = None,
        label: str | None = None,
        value: str | None = None,
        default: Any = None,
    ) -> FormService:
        return self._checkbox_radio("radio", name, label, value, default)

    def textarea(self, name: str | None = None, label: str | None = None, default: str | None = None) -> FormService:
        return self.type("textarea").name(name).value(default).label(label)

    def label(self, label: str | None) -> FormService:
        return self._set("label", label)

    def button(self, value: str | None = None) -> FormService:
        return self.type("button").value(value)

    def submit(self, value: str) -> FormService:
        return self.button(value).type("submit")

    def reset(self, value: str) -> FormService:
        return self.button(value).type("reset")

    def anchor(self, value: str, url: str | None = None) -> FormService:
        if url:
            self.url(url)
        return self.button(value).type("anchor")

    def checked(self, checked: bool = True) -> FormService:
        """Mark a checkbox or radio as checked.

        A checked radio stores its own submitted value rather than True.
        """
        checked = _BOOL.validate_python(checked)
        if self._builder.get("type") == "radio" and checked:
            return self.value(self._builder.get("meta", {}).get("value"))
        return self.value(checked)

    def value(self, value: Any = None) -> FormService:
        if value is not None:
            self._builder.set("value", value)
        return self

    def type(self, type: str) -> FormService:
        return self._set("type", type).render_as(type)

    def id(self, id: str | None) -> FormService:
        return self._set("id", id)

    def name(self, name: str | None) -> FormService:
        return self._set("name", name)

    # -- Styling --

    def size(self, size: str | None = None) -> FormService:
        return self._set("size", size)

    def lg(self) -> FormService:
        return self.size("lg")

    def sm(self) -> FormService:
        return self.size("sm")

    def color(self, color: str | None = None) -> FormService:
        return self._set("color", color)

    def primary(self) -> FormService:
        return self.color("primary")

    def secondary(self) -> FormService:
        return self.color("secondary")

    def success(self) -> FormService:
        return self.color("success")

    def danger(self) -> FormService:
        return self.color("danger")

    def warning(self) -> FormService:
        return self.color("warning")

    def info(self) -> FormService:
        return self.color("info")

    def light(self) -> FormService:
        return self.color("light")

    def dark(self) -> FormService:
        return self.color("dark")

    def link(self) -> FormService:
        return self.color("link")

    def outline(self, outline: bool = True) -> FormService:
        return self._set("outline", outline)

    def block(self, status: bool = True) -> FormService:
        return self._set("block", status)

    def readonly(self, status: bool = True) -> FormService:
        return self._set("readonly", status)

    def disabled(self, status: bool = True) -> FormService:
        return self._set("disabled", status)

    def placeholder(self, placeholder: str | None) -> FormService:
        return self._set("placeholder", placeholder)

    def attrs(self, attrs: dict[str, Any] | None = None) -> FormService:
        """Add custom HTML attributes. Repeated calls merge, later keys win."""
        return self._set("attrs", attrs)

    def multiple(self, multiple: bool = True) -> FormService:
        return self._set("multiple", multiple)

    # -- Internals --

    def _set(self, attr: str, value: Any) -> FormService:
        validator = _VALIDATORS.get(attr)
        if validator is not None:
            value = validator.validate_python(value)
        self._builder.set(attr, value)
        return self

    def _input(self, kind: str, name: str | None, label: str | None, default: Any) -> FormService:
        return self.type(kind).name(name).label(label).value(default)

    def _checkbox_radio(
        self,
        kind: str,
        name: str | None,
        label: str | None,
        value: str | None,
        default: Any,
    ) -> FormService:
        input_value = name if value is None else value
        checked_value = input_value if default else None

        return (
            self._set("meta", {"value": input_value})
            .type(kind)
            .name(name)
            .label(label)
            .value(checked_value)
        )
