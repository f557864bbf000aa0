"""Reduce bilingual summary and description text to its English part.

Many documents carry labels such as ``"获取用户信息 / Get user info"``.
:func:`english_only` picks the English alternative when the text is a
``/``-separated list and otherwise strips CJK ideographs outright.  It is a
heuristic: an all-CJK label comes back empty and the caller decides what to
show instead.
"""

from __future__ import annotations

import re

_CJK_CHARS = "\u3400-\u9fff\uf900-\ufaff"
_CJK_RE = re.compile(f"[{_CJK_CHARS}]")
_CJK_RUN_RE = re.compile(f"[{_CJK_CHARS}]+")
_LATIN_RE = re.compile(r"[A-Za-z]")
_WHITESPACE_RE = re.compile(r"\s+")


def has_cjk(text: str) -> bool:
    """Return ``True`` when *text* contains a CJK ideograph."""
    return _CJK_RE.search(text) is not None


def has_latin(text: str) -> bool:
    """Return ``True`` when *text* contains an ASCII letter."""
    return _LATIN_RE.search(text) is not None


def english_only(value: str | None) -> str:
    """Return the English part of *value*.

    With two or more non-empty ``/``-separated parts, the first part with
    Latin letters and no CJK wins, then the first part without CJK, then
    the first part with Latin letters.  Without such a part, CJK runs are
    replaced by spaces, whitespace is collapsed and the result trimmed.

    Example::

        >>> english_only("获取用户信息 / Get user info")
        'Get user info'
        >>> english_only("仅中文")
        ''
    """
    if not value:
        return ""
    trimmed = value.strip()
    if not trimmed:
        return ""

    parts = [part.strip() for part in trimmed.split("/")]
    parts = [part for part in parts if part]
    if len(parts) > 1:
        for accept in (
            lambda p: has_latin(p) and not has_cjk(p),
            lambda p: not has_cjk(p),
            has_latin,
        ):
            match = next((part for part in parts if accept(part)), None)
            if match is not None:
                return match

    stripped = _CJK_RUN_RE.sub(" ", trimmed)
    return _WHITESPACE_RE.sub(" ", stripped).strip()
