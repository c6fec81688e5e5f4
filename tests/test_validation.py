"""
Input sanitizing tests.
"""

from macrobot.utils.validation import ValidationUtils


def test_line_breaks_and_tabs_survive():
    assert ValidationUtils.sanitize_input("!a x\ty\nnext") == "!a x\ty\nnext"


def test_carriage_returns_become_newlines():
    assert ValidationUtils.sanitize_input("one\r\ntwo\rthree") == "one\ntwo\nthree"


def test_other_control_and_zero_width_characters_are_removed():
    assert ValidationUtils.sanitize_input("  !he\u200bllo\x00\x07  ") == "!hello"


def test_non_string_input():
    assert ValidationUtils.sanitize_input(None) == ""
