"""Tests for the English-only label heuristic."""

from __future__ import annotations

import pytest

from specdesk.parser.text import english_only, has_cjk, has_latin


class TestEnglishOnly:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("获取用户信息 / Get user info", "Get user info"),
            ("Get user info / 获取用户信息", "Get user info"),
            ("用户 Profile / 用户", "用户 Profile"),
            ("Echo 回显", "Echo"),
            ("  Plain English  ", "Plain English"),
            ("前缀 middle 后缀", "middle"),
            ("仅中文", ""),
            ("", ""),
            (None, ""),
        ],
    )
    def test_cases(self, value: str | None, expected: str) -> None:
        assert english_only(value) == expected

    def test_prefers_part_without_cjk_over_mixed(self) -> None:
        assert english_only("混合 mixed / 123") == "123"

    def test_single_part_with_slash_is_stripped(self) -> None:
        """A trailing slash leaves one non-empty part, so CJK is stripped instead."""
        assert english_only("用户 users /") == "users /"

    def test_compatibility_ideographs(self) -> None:
        assert english_only("豈 Title") == "Title"


class TestCharacterClasses:
    def test_has_cjk(self) -> None:
        assert has_cjk("abc 中")
        assert has_cjk("㐀")
        assert not has_cjk("abc")

    def test_has_latin(self) -> None:
        assert has_latin("中 a")
        assert not has_latin("123 中")
