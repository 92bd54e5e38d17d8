# ==============================================
# Identifier Sanitizer
# ==============================================
#
# Strips every character outside [A-Za-z0-9_] from a raw value so
# it can be used as part of a table name. No length limit and no
# collision handling: "wikipedia.org" and "wikipediaorg" both
# become "wikipediaorg".
#
# ==============================================

import re

# ASCII only; \w would let unicode letters through.
_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]")


def sanitize(raw: str) -> str:
    """Remove all characters that are not ASCII letters, digits or underscores."""
    return _NON_IDENTIFIER.sub("", raw)


def is_safe_identifier(name: str) -> bool:
    """True if name is non-empty and already sanitized."""
    return bool(name) and sanitize(name) == name
