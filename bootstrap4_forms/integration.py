"""Litestar and Jinja wiring for the form builder."""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import urljoin

from litestar import Request
from litestar.exceptions import ImproperlyConfiguredException

from bootstrap4_forms.builder import Translator
from bootstrap4_forms.config import FormSettings
from bootstrap4_forms.service import FormService

if TYPE_CHECKING:
    from litestar.plugins.jinja import JinjaTemplateEngine

CSRF_SESSION_KEY = "_csrf_token"

TEMPLATE_GLOBAL_NAME = "bootstrap_form"


def session_csrf_token(request: Request) -> str | None:
    """Return the session CSRF token, creating one if needed.

    Returns None when the app has no session middleware. Verifying the
    submitted ``_csrf`` field against this token is left to the host app.
    """
    try:
        session = request.session
    except ImproperlyConfiguredException:
        return None

    if CSRF_SESSION_KEY not in session:
        session[CSRF_SESSION_KEY] = secrets.token_urlsafe(32)
    return session[CSRF_SESSION_KEY]


def form_for(
    request: Request,
    *,
    settings: FormSettings | None = None,
    translate: Translator | None = None,
) -> FormService:
    """Create a form builder bound to *request*.

    Named routes resolve through ``app.route_reverse``, relative URLs against
    the request's base URL, and non-GET forms carry the session CSRF token.
    """

    def url_for(name: str, params: dict) -> str:
        return request.app.route_reverse(name, **params)

    def absolute_url(path: str) -> str:
        return urljoin(str(request.base_url), path)

    return FormService(
        settings=settings,
        url_for=url_for,
        absolute_url=absolute_url,
        translate=translate,
        csrf_token=lambda: session_csrf_token(request),
    )


class FormFactory:
    """Hand out form builders bound to one request.

    Each call returns a fresh FormService, so separate forms on a page never
    share state:

        forms = FormFactory(request)
        login = forms()
        search = forms()
    """

    def __init__(
        self,
        request: Request,
        settings: FormSettings | None = None,
        translate: Translator | None = None,
    ):
        self.request = request
        self.settings = settings
        self.translate = translate

    def __call__(self) -> FormService:
        return form_for(self.request, settings=self.settings, translate=self.translate)


def build_template_engine_callback(
    extra_globals: dict[str, Any] | None = None,
    translate: Translator | None = None,
    settings: FormSettings | None = None,
) -> Callable:
    """Build a template engine callback that exposes the form builder.

    Templates create a builder per request:
        {% set form = bootstrap_form(request) %}
        {{ form.open().route("contact") }}
        {{ form.text("email", "Email") }}
        {{ form.close() }}
    """

    def make_form(request: Request) -> FormService:
        return FormFactory(request, settings=settings, translate=translate)()

    def configure_engine(engine: JinjaTemplateEngine):
        engine.engine.globals.update({
            TEMPLATE_GLOBAL_NAME: make_form,
            **(extra_globals or {}),
        })

    return configure_engine
