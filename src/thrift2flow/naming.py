"""Identifier transforms applied to every declared and referenced type name."""

from __future__ import annotations

from typing import Callable

NameTransform = Callable[[str], str]


def identity(name: str) -> str:
    return name


def upper_camel(name: str) -> str:
    """Convert snake_case or camelCase to UpperCamelCase: user_info -> UserInfo."""
    parts = [p for p in name.split("_") if p]
    return "".join(p[0].upper() + p[1:] for p in parts)


def _last_segment(transform: NameTransform) -> NameTransform:
    """Apply ``transform`` to the final segment of a dotted name only.

    ``shared.Foo`` becomes ``shared.<transform(Foo)>``, which is the name the
    generated ``shared`` module declares.
    """

    def apply(name: str) -> str:
        module, dot, local = name.rpartition(".")
        return f"{module}{dot}{transform(local)}"

    return apply


def make_name_transform(
    prefix: str = "",
    suffix: str = "",
    camel_case: bool = False,
) -> NameTransform:
    """Build a name transform from the command-line naming options."""
    if not prefix and not suffix and not camel_case:
        return identity

    def transform(name: str) -> str:
        if camel_case:
            name = upper_camel(name)
        return f"{prefix}{name}{suffix}"

    return _last_segment(transform)
