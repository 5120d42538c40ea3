"""Label to machine-identifier conversion."""

from __future__ import annotations

_SEPARATORS = frozenset("-_")


def slugify(label: str) -> str:
    """Convert a display label to a lower-case identifier.

    Letters and decimal digits are kept (lower-cased), runs of whitespace, ``-`` and
    ``_`` collapse into one ``_`` and all other characters are dropped::

        >>> slugify("Turn On Living Room Lights")
        'turn_on_living_room_lights'
        >>> slugify("Test - Automation _ Name")
        'test_automation_name'
    """
    out: list[str] = []
    for char in label:
        if char.isalpha() or char.isdecimal():
            # one code point per character, "İ".lower() is two
            out.append(char.lower()[0])
        elif char.isspace() or char in _SEPARATORS:
            if out and out[-1] != "_":
                out.append("_")

    if out and out[-1] == "_":
        out.pop()
    return "".join(out)
