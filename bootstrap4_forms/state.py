"""Field state holder and permissive input coercion for the form builder."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple

logger = logging.getLogger(__name__)

PLACEHOLDER_LABEL = "Must be iterable"

# Keys that apply to every field of the currently open form
FORM_LEVEL_KEYS = frozenset({"id_prefix", "data", "locale", "errors", "check_inline_form"})


class Option(NamedTuple):
    """A single <option> entry."""

    value: Any
    label: Any


class OptionGroup(NamedTuple):
    """A labelled group of options, rendered as <optgroup>."""

    label: Any
    options: tuple[Option, ...]


OptionEntry = Option | OptionGroup


def _is_collection(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes, bytearray))


def _group_options(items: Any) -> tuple[Option, ...]:
    return tuple(
        entry for entry in _iter_entries(items) if isinstance(entry, Option)
    )


def _iter_entries(items: Any):
    if isinstance(items, Mapping):
        for value, label in items.items():
            if isinstance(label, Mapping) or _is_collection(label):
                yield OptionGroup(value, _group_options(label))
            else:
                yield Option(value, label)
        return

    for index, item in enumerate(items):
        if isinstance(item, (Option, OptionGroup)):
            yield item
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            first, second = item
            if isinstance(second, Mapping) or _is_collection(second):
                yield OptionGroup(first, _group_options(second))
            else:
                yield Option(first, second)
        else:
            yield Option(index, item)


def normalize_options(options: Any) -> list[OptionEntry]:
    """Turn mappings and iterables into option entries.

    Anything that cannot be iterated (strings included) collapses into a
    single placeholder entry instead of raising.
    """
    if not (isinstance(options, Mapping) or _is_collection(options)):
        logger.warning("Select options must be iterable, got %s", type(options).__name__)
        return [Option(0, PLACEHOLDER_LABEL)]
    return list(_iter_entries(options))


def normalize_data(data: Any, source: str = "fill data") -> dict:
    """Coerce *source* into a plain dict, degrading to {} when not possible."""
    if isinstance(data, Mapping):
        return dict(data)

    if not isinstance(data, type):
        for converter in ("model_dump", "to_dict", "toArray"):
            method = getattr(data, converter, None)
            if callable(method):
                try:
                    converted = method()
                except TypeError:
                    break
                if isinstance(converted, Mapping):
                    return dict(converted)
                break

        if dataclasses.is_dataclass(data):
            return dataclasses.asdict(data)

    if data is not None:
        kind = data.__name__ if isinstance(data, type) else type(data).__name__
        logger.warning("Cannot use %s as %s, ignoring", kind, source)
    return {}


@dataclass
class FieldState:
    """Mutable attributes accumulated by a fluent chain.

    Field level attributes describe the control being configured and are
    cleared after each render. Form level attributes (see FORM_LEVEL_KEYS)
    live until the form is closed.
    """

    type: str | None = None
    name: str | None = None
    label: str | None = None
    value: Any = None
    id: str | None = None
    size: str | None = None
    color: str | None = None
    options: list[OptionEntry] = field(default_factory=list)
    meta: dict[str, Any] = field(default_factory=dict)
    help: str | None = None
    placeholder: str | None = None
    attrs: dict[str, Any] = field(default_factory=dict)
    url: str | None = None
    method: str | None = None
    multipart: bool = False
    outline: bool = False
    block: bool = False
    readonly: bool = False
    disabled: bool = False
    multiple: bool = False
    check_inline: bool = False

    # Form level
    id_prefix: str = ""
    data: dict[str, Any] = field(default_factory=dict)
    locale: str = ""
    errors: dict[str, Any] = field(default_factory=dict)
    check_inline_form: bool = False

    def get(self, attr: str, default: Any = None) -> Any:
        value = getattr(self, attr)
        return default if value is None else value

    def set(self, attr: str, value: Any) -> None:
        if attr not in self._field_names():
            raise AttributeError(f"Unknown field attribute '{attr}'")
        if attr == "attrs":
            value = {**self.attrs, **(value or {})}
        setattr(self, attr, value)

    def reset_field(self) -> None:
        """Restore field level attributes, keeping the form level ones."""
        defaults = FieldState()
        for name in self._field_names() - FORM_LEVEL_KEYS:
            setattr(self, name, getattr(defaults, name))

    def reset(self) -> None:
        defaults = FieldState()
        for name in self._field_names():
            setattr(self, name, getattr(defaults, name))

    @classmethod
    def _field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in dataclasses.fields(cls))
