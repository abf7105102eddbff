#  ReceiptPy is a software allowing to interpret ESC/POS-like receipt printer
#  command scripts and to render them into PDF files.
#  Copyright (C) 2024-2025  Ysard
#
#  This program is free software: you can redistribute it and/or modify
#  it under the terms of the GNU Affero General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  This program is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU Affero General Public License for more details.
#
#  You should have received a copy of the GNU Affero General Public License
#  along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Test commands that modify the style of the text"""
# Custom imports
import pytest

# Local imports
from receiptparser.parser import ReceiptParser, parse_integer
from receiptparser.styles import (
    StyleContext,
    SizeScale,
    WidthMode,
    Alignment,
    TextRun,
)
from .misc import (
    format_script,
    build_script,
    esc_reset,
    double_height_bold,
    double_width_height,
    cancel_print_mode,
    emphasis_on,
    emphasis_off,
    align_center,
    underline_on,
    underline_off,
    double_strike_on,
    rotation_on,
)


@pytest.mark.parametrize(
    "format_script, expected",
    [
        (["ESC ! 0", "Hi"], (False, SizeScale.NORMAL, WidthMode.NORMAL)),
        (["ESC ! 8", "Hi"], (True, SizeScale.NORMAL, WidthMode.NORMAL)),
        (["ESC ! 24", "Hi"], (True, SizeScale.DOUBLE_HEIGHT, WidthMode.NORMAL)),
        (["ESC ! 16", "Hi"], (False, SizeScale.DOUBLE_HEIGHT, WidthMode.NORMAL)),
        (["ESC ! 32", "Hi"], (False, SizeScale.DOUBLE_WIDTH_HEIGHT, WidthMode.DOUBLE_WIDTH)),
        # 0x38: double-width & height takes precedence over double-height
        (["ESC ! 56", "Hi"], (True, SizeScale.DOUBLE_WIDTH_HEIGHT, WidthMode.DOUBLE_WIDTH)),
        (["ESC ! 00", "Hi"], (False, SizeScale.NORMAL, WidthMode.NORMAL)),
        # Malformed values are read as 0
        (["ESC ! 8", "ESC ! abc", "Hi"], (False, SizeScale.NORMAL, WidthMode.NORMAL)),
        (["ESC ! 8", "ESC !", "Hi"], (False, SizeScale.NORMAL, WidthMode.NORMAL)),
        # Leading digits only
        (["ESC ! 24px", "Hi"], (True, SizeScale.DOUBLE_HEIGHT, WidthMode.NORMAL)),
    ],
    indirect=["format_script"],
    ids=[
        "cancel",
        "bold",
        "bold_double_height",
        "double_height",
        "double_width_height",
        "double_width_height_precedence",
        "leading_zero",
        "not_numeric",
        "missing",
        "trailing_garbage",
    ],
)
def test_master_select(format_script, expected):
    """Select print modes - ESC !"""
    receipt = ReceiptParser(format_script)

    (token,) = receipt.tokens
    assert token.content == "Hi\n"
    assert (token.style.bold, token.style.size_scale, token.style.width_mode) == expected


def test_master_select_keeps_other_attributes():
    """ESC ! does not modify alignment, underline, etc."""
    script = build_script(align_center, underline_on, double_height_bold, "Hi")
    receipt = ReceiptParser(script)

    style = receipt.tokens[0].style
    assert style.alignment == Alignment.CENTER
    assert style.underline
    assert style.bold


@pytest.mark.parametrize(
    "format_script, expected_bold, expected_emphasized",
    [
        ([emphasis_on, "Hi"], True, True),
        ([emphasis_on, emphasis_off, "Hi"], False, False),
        (["ESC E 2", "Hi"], False, False),
        (["ESC E", "Hi"], False, False),
        # ESC E overwrites the bold bit of ESC !
        ([double_height_bold, emphasis_off, "Hi"], False, False),
        # ESC ! overwrites the bold setting of ESC E
        ([emphasis_on, cancel_print_mode, "Hi"], False, True),
        ([emphasis_on, "ESC ! 8", "Hi"], True, True),
    ],
    indirect=["format_script"],
    ids=[
        "on",
        "off",
        "other_value",
        "missing",
        "emphasis_overwrites_master_select",
        "master_select_overwrites_emphasis",
        "both",
    ],
)
def test_switch_emphasis(format_script, expected_bold, expected_emphasized):
    """Turn on/off emphasized mode - ESC E

    Bold attribute: last write wins between ESC E & ESC !.
    """
    receipt = ReceiptParser(format_script)

    style = receipt.tokens[-1].style
    assert style.bold == expected_bold
    assert style.emphasized == expected_emphasized


@pytest.mark.parametrize(
    "format_script, expected",
    [
        (["Hi"], Alignment.LEFT),
        (["ESC a 0", "Hi"], Alignment.LEFT),
        (["ESC a 1", "Hi"], Alignment.CENTER),
        (["ESC a 2", "Hi"], Alignment.RIGHT),
        (["ESC a 01", "Hi"], Alignment.RIGHT),
        (["ESC a x", "Hi"], Alignment.RIGHT),
        (["ESC a", "Hi"], Alignment.RIGHT),
    ],
    indirect=["format_script"],
    ids=["default", "left", "center", "right", "not_exact", "other", "missing"],
)
def test_select_justification(format_script, expected):
    """Align the next lines - ESC a

    Only "0" and "1" are recognized, any other value is right alignment.
    """
    receipt = ReceiptParser(format_script)

    assert receipt.tokens[-1].style.alignment == expected


@pytest.mark.parametrize(
    "command, attribute",
    [
        ("ESC -", "underline"),
        ("ESC G", "strike"),
        ("ESC V", "rotated90"),
    ],
    ids=["underline", "double_strike", "rotation"],
)
@pytest.mark.parametrize(
    "value, expected",
    [("1", True), ("0", False), ("2", False), ("", False)],
    ids=["on", "off", "other", "missing"],
)
def test_switches(command, attribute, value, expected):
    """Turn on/off underline, double-strike, rotation - ESC -, ESC G, ESC V"""
    script = build_script(esc_reset, f"{command} 1", "On", f"{command} {value}", "Hi")
    receipt = ReceiptParser(script)

    first, last = receipt.tokens
    assert getattr(first.style, attribute)
    assert getattr(last.style, attribute) == expected


def test_underline_strike_independent():
    """Underline & double-strike can be combined"""
    script = build_script(underline_on, double_strike_on, "Hi", underline_off, "Ho")
    receipt = ReceiptParser(script)

    first, last = receipt.tokens
    assert first.style.underline and first.style.strike
    assert not last.style.underline and last.style.strike


@pytest.mark.parametrize(
    "format_script, expected",
    [
        (["GS ! 0", "Hi"], 1),
        (["GS ! 1", "Hi"], 1.5),
        (["GS ! 17", "Hi"], 9.5),
        (["GS ! x", "Hi"], 1),
        (["GS !", "Hi"], 1),
        (["Hi"], None),
    ],
    indirect=["format_script"],
    ids=["zero", "one", "seventeen", "not_numeric", "missing", "not_set"],
)
def test_select_character_size(format_script, expected):
    """Select character size - GS !

    The scale is independent of the ESC ! magnification.
    """
    receipt = ReceiptParser(format_script)

    style = receipt.tokens[-1].style
    assert style.character_scale == expected
    assert style.size_scale == SizeScale.NORMAL


def test_character_size_and_master_select():
    """GS ! & ESC ! settings are kept side by side"""
    script = build_script(double_width_height, "GS ! 2", "Hi")
    receipt = ReceiptParser(script)

    style = receipt.tokens[0].style
    assert style.character_scale == 2
    assert style.size_scale == SizeScale.DOUBLE_WIDTH_HEIGHT


def test_reset_printer():
    """Initialize printer - ESC @

    The style context is reset for the next lines.
    """
    script = build_script(
        double_height_bold,
        align_center,
        underline_on,
        double_strike_on,
        rotation_on,
        emphasis_on,
        "GS ! 3",
        "Before",
        esc_reset,
        "After",
    )
    receipt = ReceiptParser(script)

    before, after = receipt.tokens
    assert before.style != StyleContext()
    assert after.style == StyleContext()
    assert receipt.style == StyleContext()
    assert receipt.action_log == ["Printer Initialized"]


def test_style_isolation():
    """Style changes apply to the next tokens only"""
    script = build_script("Normal", double_height_bold, "Bold", cancel_print_mode, "Normal")
    receipt = ReceiptParser(script)

    first, second, third = receipt.tokens
    assert first.style == StyleContext()
    assert second.style.bold
    assert third.style == StyleContext()


def test_line_feed_style():
    """LF uses the current style"""
    script = build_script(align_center, "LF", emphasis_on, "lf")
    receipt = ReceiptParser(script)

    assert receipt.tokens == [
        TextRun("\n", StyleContext(alignment=Alignment.CENTER)),
        TextRun("\n", StyleContext(alignment=Alignment.CENTER, bold=True, emphasized=True)),
    ]


@pytest.mark.parametrize(
    "value, expected",
    [
        ("24", 24),
        ("024", 24),
        ("+5", 5),
        ("-3", -3),
        ("24abc", 24),
        ("abc", 0),
        ("", 0),
        (None, 0),
        ("0x18", 0),
    ],
)
def test_parse_integer(value, expected):
    """Lenient reading of numeric arguments"""
    assert parse_integer(value) == expected
