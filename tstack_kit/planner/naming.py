"""Entity name derivation.

Turns a raw entity name (``"article"``, ``"SiteSetting"``, ``"site-setting"``)
into every spelling the templates need.  Pluralisation is the simple English
rule only; irregular plurals such as ``person`` are not handled and come out
as ``persons``.
"""

from __future__ import annotations

import re
from typing import Optional

from .errors import InvalidIdentifier
from .models import NamingForms


_ENTITY_NAME_RE = re.compile(r"^[A-Za-z]+(?:[-_ ][A-Za-z]+)*$")
_FIELD_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9]*(?:_[A-Za-z0-9]+)*$")


def split_words(name: str) -> list[str]:
    """Split camelCase, PascalCase, kebab-case or snake_case into lowercase words."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return [word.lower() for word in re.split(r"[-_\s]+", s2) if word]


def pluralize(word: str) -> str:
    """Pluralise a single lowercase English word.

    Examples::

        pluralize("article")  -> "articles"
        pluralize("category") -> "categories"
        pluralize("key")      -> "keys"
        pluralize("box")      -> "boxes"
    """
    if word.endswith(("s", "x", "ch", "sh")):
        return word + "es"
    if word.endswith("y") and len(word) > 1 and word[-2] not in "aeiou":
        return word[:-1] + "ies"
    return word + "s"


def to_snake_case(name: str) -> str:
    """``authorId`` -> ``author_id``; ``site-setting`` -> ``site_setting``."""
    return "_".join(split_words(name))


def _camel(words: list[str]) -> str:
    return words[0] + "".join(w.capitalize() for w in words[1:])


def _pascal(words: list[str]) -> str:
    return "".join(w.capitalize() for w in words)


def is_valid_field_name(field: str) -> bool:
    """Return ``True`` if *field* is usable as a column/property name."""
    return bool(_FIELD_NAME_RE.match(field))


def derive_names(name: str, ownership_field: Optional[str] = None) -> NamingForms:
    """Compute the naming forms for *name*.

    Args:
        name: Singular entity name in any common casing.
        ownership_field: Optional ownership column, whose snake_case form is
            included in the result.

    Raises:
        InvalidIdentifier: If *name* is empty or contains anything other than
            letters and single word separators, or *ownership_field* is not a
            valid identifier.
    """
    raw = (name or "").strip()
    if not raw:
        raise InvalidIdentifier("entity name must not be empty", field="name")
    if not _ENTITY_NAME_RE.match(raw):
        raise InvalidIdentifier(
            f"entity name {raw!r} must contain only letters "
            "(words may be separated by '-' or '_')",
            field="name",
        )

    words = split_words(raw)
    plural_words = words[:-1] + [pluralize(words[-1])]

    field_snake: Optional[str] = None
    if ownership_field is not None:
        if not is_valid_field_name(ownership_field):
            raise InvalidIdentifier(
                f"{ownership_field!r} is not a valid field name",
                entity=_camel(words),
                field="ownershipField",
            )
        field_snake = to_snake_case(ownership_field)

    return NamingForms(
        entity_name=_camel(words),
        entity_name_pascal=_pascal(words),
        entity_name_plural=_camel(plural_words),
        entity_name_plural_pascal=_pascal(plural_words),
        table_name="_".join(plural_words),
        kebab_name="-".join(words),
        snake_name="_".join(words),
        ownership_field_snake=field_snake,
    )
