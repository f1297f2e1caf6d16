"""Tests for FormBuilder from bootstrap4_forms.builder."""

from __future__ import annotations

import pytest
from markupsafe import Markup

from bootstrap4_forms.builder import FormBuilder, RenderKind
from bootstrap4_forms.config import FormSettings
from bootstrap4_forms.state import FieldState, Option, OptionGroup


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _builder(settings=None, **attrs) -> FormBuilder:
    """Shortcut to create a FormBuilder over a state with *attrs* set."""
    state = FieldState()
    for key, value in attrs.items():
        state.set(key, value)
    return FormBuilder(state, settings=settings or FormSettings())


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    def test_every_kind_has_a_renderer(self):
        builder = _builder()
        assert set(builder._renderers) == set(RenderKind)

    @pytest.mark.parametrize("kind", [None, "", "bogus", "fieldsetOpen", 3])
    def test_unknown_kind_renders_empty(self, kind):
        html = _builder(type="text", name="n").render(kind)
        assert isinstance(html, Markup)
        assert html == ""

    def test_accepts_enum_and_string(self):
        builder = _builder()
        assert builder.render(RenderKind.CLOSE) == builder.render("close") == "</form>"

    def test_parse(self):
        assert RenderKind.parse("select") is RenderKind.SELECT
        assert RenderKind.parse("nope") is None


# ---------------------------------------------------------------------------
# Form tags
# ---------------------------------------------------------------------------


class TestOpen:
    def test_defaults_to_post(self):
        assert _builder().render("open") == '<form method="post">'

    def test_get_with_action(self):
        html = _builder(method="get", url="/search").render("open")
        assert html == '<form method="get" action="/search">'

    def test_spoofed_method_adds_hidden_field(self):
        html = _builder(method="put").render("open")
        assert html == '<form method="post"><input type="hidden" name="_method" value="PUT">'

    def test_multipart_and_inline(self):
        html = _builder(multipart=True, check_inline_form=True).render("open")
        assert 'enctype="multipart/form-data"' in html
        assert 'class="form-inline"' in html

    def test_custom_attrs(self):
        html = _builder(attrs={"novalidate": True, "data_role": "search"}).render("open")
        assert html == '<form method="post" novalidate data-role="search">'

    def test_csrf_token_for_post(self):
        builder = FormBuilder(settings=FormSettings(), csrf_token=lambda: "tok")
        html = builder.render("open")
        assert '<input type="hidden" name="_csrf" value="tok">' in html

    def test_no_csrf_token_for_get(self):
        state = FieldState()
        state.set("method", "get")
        builder = FormBuilder(state, settings=FormSettings(), csrf_token=lambda: "tok")
        assert "_csrf" not in builder.render("open")

    def test_missing_token_is_skipped(self):
        builder = FormBuilder(settings=FormSettings(), csrf_token=lambda: None)
        assert builder.render("open") == '<form method="post">'

    def test_configured_default_method(self):
        html = _builder(settings=FormSettings(default_method="get")).render("open")
        assert html == '<form method="get">'


class TestFieldset:
    def test_open_with_legend(self):
        html = _builder(meta={"legend": "Details"}).render("fieldset_open")
        assert html == "<fieldset><legend>Details</legend>"

    def test_open_without_legend(self):
        assert _builder().render("fieldset_open") == "<fieldset>"

    def test_close(self):
        assert _builder().render("fieldset_close") == "</fieldset>"


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


class TestInput:
    def test_text_input_group(self):
        html = _builder(type="text", name="n", label="L", value="v").render("text")
        assert html == (
            '<div class="form-group"><label for="n">L</label>'
            '<input type="text" name="n" value="v" class="form-control" id="n"></div>'
        )

    def test_value_falls_back_to_filled_data(self):
        html = _builder(type="email", name="email", data={"email": "a@b.c"}).render("email")
        assert 'value="a@b.c"' in html

    def test_explicit_value_wins_over_data(self):
        html = _builder(type="text", name="n", value="explicit", data={"n": "filled"}).render("text")
        assert 'value="explicit"' in html
        assert "filled" not in html

    def test_password_is_never_filled(self):
        html = _builder(type="password", name="pw", data={"pw": "secret"}).render("password")
        assert "secret" not in html
        assert "value=" not in html

    def test_id_prefix(self):
        html = _builder(type="text", name="n", label="L", id_prefix="signup-").render("text")
        assert 'id="signup-n"' in html
        assert 'for="signup-n"' in html

    def test_explicit_id(self):
        html = _builder(type="text", name="n", id="custom", id_prefix="p-").render("text")
        assert 'id="custom"' in html

    def test_size_placeholder_and_flags(self):
        html = _builder(
            type="number", name="qty", size="lg", placeholder="0", readonly=True, disabled=True
        ).render("number")
        assert 'class="form-control form-control-lg"' in html
        assert 'placeholder="0"' in html
        assert " readonly" in html
        assert " disabled" in html

    def test_file_input(self):
        html = _builder(type="file", name="avatar", value="ignored").render("file")
        assert '<input type="file" name="avatar" class="form-control-file" id="avatar">' in html
        assert "ignored" not in html

    def test_help_text(self):
        html = _builder(type="text", name="n", help="We never share it").render("text")
        assert '<small class="form-text text-muted">We never share it</small>' in html

    def test_error_marks_field_invalid(self):
        html = _builder(type="text", name="n", errors={"n": ["Required", "Too short"]}).render("text")
        assert 'class="form-control is-invalid"' in html
        assert '<div class="invalid-feedback">Required</div>' in html
        assert "Too short" not in html

    def test_user_classes_are_appended(self):
        html = _builder(type="text", name="n", attrs={"class": "wide"}).render("text")
        assert 'class="form-control wide"' in html

    def test_inline_form_spacing(self):
        html = _builder(type="text", name="n", check_inline_form=True).render("text")
        assert html.startswith('<div class="form-group mb-2 mr-sm-2">')

    def test_hidden_has_no_wrapper(self):
        html = _builder(type="hidden", name="token", value="abc").render("hidden")
        assert html == '<input type="hidden" name="token" value="abc">'


class TestSelect:
    def test_renders_options_and_selection(self):
        html = _builder(
            type="select",
            name="color",
            label="Color",
            options=[Option("r", "Red"), Option("g", "Green")],
            value="g",
        ).render("select")
        assert html == (
            '<div class="form-group"><label for="color">Color</label>'
            '<select name="color" class="form-control" id="color">'
            '<option value="r">Red</option><option value="g" selected>Green</option>'
            "</select></div>"
        )

    def test_multiple_selection(self):
        html = _builder(
            type="select",
            name="tags",
            options=[Option(0, "a"), Option(1, "b"), Option(2, "c")],
            value=[0, 2],
            multiple=True,
        ).render("select")
        assert " multiple" in html
        assert '<option value="0" selected>a</option>' in html
        assert '<option value="1">b</option>' in html
        assert '<option value="2" selected>c</option>' in html

    def test_optgroup(self):
        html = _builder(
            type="select",
            name="food",
            options=[OptionGroup("Fruits", (Option("apple", "Apple"),))],
        ).render("select")
        assert '<optgroup label="Fruits"><option value="apple">Apple</option></optgroup>' in html

    def test_selection_from_filled_data(self):
        html = _builder(
            type="select", name="color", options=[Option("r", "Red")], data={"color": "r"}
        ).render("select")
        assert '<option value="r" selected>Red</option>' in html


class TestCheckRadio:
    def test_checkbox(self):
        html = _builder(type="checkbox", name="a", label="Agree", meta={"value": "a"}).render("checkbox")
        assert html == (
            '<div class="form-check">'
            '<input type="checkbox" class="form-check-input" id="a" name="a" value="a">'
            '<label class="form-check-label" for="a">Agree</label></div>'
        )

    def test_checked_when_value_true(self):
        html = _builder(type="checkbox", name="a", meta={"value": "a"}, value=True).render("checkbox")
        assert " checked" in html

    def test_unchecked_when_value_false(self):
        html = _builder(
            type="checkbox", name="a", meta={"value": "a"}, value=False, data={"a": "a"}
        ).render("checkbox")
        assert " checked" not in html

    def test_radio_checked_by_matching_value(self):
        html = _builder(type="radio", name="g", meta={"value": "x"}, value="x").render("radio")
        assert 'id="g-x"' in html
        assert " checked" in html

    def test_radio_not_checked_by_other_value(self):
        html = _builder(type="radio", name="g", meta={"value": "x"}, value="y").render("radio")
        assert " checked" not in html

    def test_checked_from_filled_list(self):
        html = _builder(
            type="checkbox", name="tags", meta={"value": "b"}, data={"tags": ["a", "b"]}
        ).render("checkbox")
        assert " checked" in html

    def test_inline(self):
        html = _builder(type="radio", name="g", meta={"value": "x"}, check_inline=True).render("radio")
        assert html.startswith('<div class="form-check form-check-inline">')


class TestTextarea:
    def test_escapes_body(self):
        html = _builder(type="textarea", name="bio", value="<b>hi</b>").render("textarea")
        assert '<textarea name="bio" class="form-control" id="bio" rows="3">' in html
        assert "&lt;b&gt;hi&lt;/b&gt;</textarea>" in html

    def test_rows_from_settings_and_attrs(self):
        html = _builder(FormSettings(textarea_rows=5), type="textarea", name="bio").render("textarea")
        assert 'rows="5"' in html
        html = _builder(type="textarea", name="bio", attrs={"rows": 8}).render("textarea")
        assert 'rows="8"' in html


# ---------------------------------------------------------------------------
# Buttons and anchors
# ---------------------------------------------------------------------------


class TestButtons:
    def test_submit(self):
        html = _builder(type="submit", value="Send").render("submit")
        assert html == '<button type="submit" class="btn btn-primary">Send</button>'

    def test_styles(self):
        html = _builder(
            type="reset", value="Clear", color="danger", outline=True, size="lg", block=True
        ).render("reset")
        assert 'class="btn btn-outline-danger btn-lg btn-block"' in html
        assert 'type="reset"' in html

    def test_default_color_from_settings(self):
        html = _builder(FormSettings(default_button_color="dark"), type="button", value="Go").render("button")
        assert 'class="btn btn-dark"' in html

    def test_anchor(self):
        html = _builder(type="anchor", value="Back", url="/home").render("anchor")
        assert html == '<a href="/home" class="btn btn-primary" role="button">Back</a>'

    def test_disabled_anchor(self):
        html = _builder(type="anchor", value="Back", url="/home", disabled=True).render("anchor")
        assert 'class="btn btn-primary disabled"' in html
        assert 'aria-disabled="true"' in html


# ---------------------------------------------------------------------------
# Translation and escaping
# ---------------------------------------------------------------------------


class TestTranslation:
    def test_locale_translates_label_placeholder_and_help(self):
        catalog = {"forms.Name": "Nom", "forms.Your name": "Votre nom", "forms.Required": "Requis"}
        state = FieldState()
        for key, value in {
            "type": "text", "name": "name", "label": "Name",
            "placeholder": "Your name", "help": "Required", "locale": "forms",
        }.items():
            state.set(key, value)
        builder = FormBuilder(state, settings=FormSettings(), translate=lambda key: catalog.get(key, key))

        html = builder.render("text")

        assert ">Nom</label>" in html
        assert 'placeholder="Votre nom"' in html
        assert ">Requis</small>" in html

    def test_no_translation_without_locale(self):
        builder = FormBuilder(settings=FormSettings(), translate=lambda key: "translated")
        builder.set("type", "submit")
        builder.set("value", "Send")
        assert ">Send</button>" in builder.render("submit")

    def test_configured_locale(self):
        builder = FormBuilder(settings=FormSettings(locale="app"), translate=lambda key: key.upper())
        builder.set("type", "submit")
        builder.set("value", "send")
        assert ">APP.SEND</button>" in builder.render("submit")


class TestHtmlEscaping:
    def test_script_in_value_is_escaped(self):
        html = _builder(type="text", name="n", value='"><script>alert(1)</script>').render("text")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_script_in_label_is_escaped(self):
        html = _builder(type="text", name="n", label="<script>").render("text")
        assert "<script>" not in html

    def test_script_in_option_is_escaped(self):
        html = _builder(type="select", name="s", options=[Option("<x>", "<y>")]).render("select")
        assert "<x>" not in html
        assert "&lt;y&gt;" in html

    def test_custom_escaper_is_used(self):
        state = FieldState()
        state.set("type", "submit")
        state.set("value", "Send")
        builder = FormBuilder(state, settings=FormSettings(), escape=lambda value: f"[{value}]")
        assert "[Send]" in builder.render("submit")
