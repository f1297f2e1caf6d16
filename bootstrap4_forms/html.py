"""Small HTML helpers shared by the renderers."""

from __future__ import annotations

from typing import Any, Callable

from markupsafe import escape as markup_escape

Escaper = Callable[[Any], str]


def class_names(*names: str | None) -> str:
    """Join CSS class names, skipping empty ones. class_names("a", None, "b") -> "a b" """
    return " ".join(name for name in names if name)


def render_attrs(attrs: dict, escape: Escaper = markup_escape) -> str:
    """Render a dict as HTML attributes string. Returns '' or ' key="val" flag'.

    True renders a bare attribute, False and None drop it. Python style keys
    are converted: class_ -> class, data_id -> data-id.
    """
    if not attrs:
        return ""
    parts = []
    for k, v in attrs.items():
        if v is None or v is False:
            continue
        attr_name = k.rstrip("_").replace("_", "-")
        if v is True:
            parts.append(attr_name)
        else:
            parts.append(f'{attr_name}="{escape(str(v))}"')
    if not parts:
        return ""
    return " " + " ".join(parts)
