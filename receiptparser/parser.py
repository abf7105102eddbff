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
"""Main interpreter routines used to build receipt tokens from command scripts"""
# Standard imports
import re

# Custom imports
from lark import Token

# Local imports
from receiptparser.grammar import init_parser
from receiptparser.styles import (
    StyleContext,
    SizeScale,
    WidthMode,
    Alignment,
    TextRun,
    QRPlaceholder,
)
from receiptparser.commons import (
    PRINTER_INITIALIZED,
    CASH_DRAWER_OPENED,
    PAPER_CUT,
    QR_CODE_GENERATED,
    CUT_PAPER_TEXT,
    QR_SIZE_NORMAL,
    QR_SIZE_LARGE,
)
from receiptparser.commons import logger

LOGGER = logger()

# Leading integer of an argument: "24", "+24", "24abc"
INTEGER_PATTERN = re.compile(r"[+-]?\d+")


def parse_integer(value: str | None) -> int:
    """Get the leading integer of the given argument

    Arguments are not validated: a missing or non-numeric value is read as 0.

    :param value: Command argument; can be None if it is missing.
    """
    if value is None:
        return 0
    match = INTEGER_PATTERN.match(value)
    if not match:
        LOGGER.debug("Not a numeric argument: %s; use 0", value)
        return 0
    return int(match.group())


class ReceiptParser:
    """Parser routines used to interpret command scripts and build receipt tokens

    The script is parsed during the instantiation; results are available in
    the following attributes:

    - `tokens`: Ordered list of :class:`TextRun` & :class:`QRPlaceholder`.
    - `action_log`: Ordered list of side-effecting actions encountered.
    - `style`: The style context in use at the end of the script.

    Each command handler receives the current style context and the
    tokens of the command (keyword, sub-command, arguments); it returns the
    style context to be used for the next lines.
    """

    def __init__(self, script):
        """

        :param script: Command script to be parsed.
        :type script: str
        """
        # Prepare for methods search in run_instruction()
        self.dir = frozenset(dir(self))

        self.tokens: list[TextRun | QRPlaceholder] = []
        self.action_log: list[str] = []
        self.style = StyleContext()

        # Parse it !
        self.run_script(script)

    @staticmethod
    def get_params(args) -> list[str]:
        """Get the values of the ARG tokens of a command (internal use)

        :param args: Tokens of the command (keyword, sub-command, arguments).
        :type args: tuple[lark.Token]
        """
        return [token.value for token in args if token.type == "ARG"]

    def log_action(self, message: str):
        """Append the given message to the action log"""
        LOGGER.info(message)
        self.action_log.append(message)

    def print_text(self, style, text: Token):
        """Print a literal line of text"""
        self.tokens.append(TextRun(text.value + "\n", style))
        return style

    def line_feed(self, style, *_):
        """Print a line terminator in the current style - LF"""
        self.tokens.append(TextRun("\n", style))
        return style

    def reset_printer(self, style, *_):
        """Initialize printer - ESC @

        Clear the style context; the default settings apply to the next lines.
        """
        self.log_action(PRINTER_INITIALIZED)
        return StyleContext()

    def master_select(self, style, *args):
        """Select print modes - ESC !

        bitmasks :
            8,  # bold
            16,  # double-height
            32,  # double-width & double-height (takes precedence over 16)

        .. note:: Other attributes of the style are not modified.
        """
        params = self.get_params(args)
        value = parse_integer(params[0] if params else None)

        if value & 0x20:
            size_scale = SizeScale.DOUBLE_WIDTH_HEIGHT
        elif value & 0x10:
            size_scale = SizeScale.DOUBLE_HEIGHT
        else:
            size_scale = SizeScale.NORMAL

        return style.update(
            bold=bool(value & 0x08),
            size_scale=size_scale,
            width_mode=WidthMode.DOUBLE_WIDTH if value & 0x20 else WidthMode.NORMAL,
        )

    def switch_emphasis(self, style, *args):
        """Turn on/off emphasized mode - ESC E

        Overwrites the bold setting made by ESC !.
        """
        enabled = self.get_params(args)[:1] == ["1"]
        return style.update(bold=enabled, emphasized=enabled)

    def select_justification(self, style, *args):
        """Align the next lines - ESC a

        0: left, 1: center, any other value: right.
        """
        match self.get_params(args)[:1]:
            case ["0"]:
                alignment = Alignment.LEFT
            case ["1"]:
                alignment = Alignment.CENTER
            case _:
                alignment = Alignment.RIGHT
        return style.update(alignment=alignment)

    def switch_underline(self, style, *args):
        """Turn on/off underline mode - ESC -"""
        return style.update(underline=self.get_params(args)[:1] == ["1"])

    def switch_double_strike(self, style, *args):
        """Turn on/off double-strike mode - ESC G

        .. note:: Rendered as a line through the text.
        """
        return style.update(strike=self.get_params(args)[:1] == ["1"])

    def switch_rotation(self, style, *args):
        """Turn on/off 90° counter-clockwise rotation mode - ESC V"""
        return style.update(rotated90=self.get_params(args)[:1] == ["1"])

    def generate_pulse(self, style, *_):
        """Generate a pulse on the drawer kick-out connector - ESC p"""
        self.log_action(CASH_DRAWER_OPENED)
        return style

    def select_character_size(self, style, *args):
        """Select character size - GS !

        The font is scaled by n/2 + 1; this setting is independent of the
        magnification selected by ESC !.
        """
        params = self.get_params(args)
        value = parse_integer(params[0] if params else None)
        return style.update(character_scale=value / 2 + 1)

    def cut_paper(self, style, *_):
        """Cut the paper - GS V"""
        self.tokens.append(TextRun(CUT_PAPER_TEXT, style))
        self.log_action(PAPER_CUT)
        return style

    def select_function(self, style, *args):
        """Execute a function of a symbol - GS (

        Only QR codes are supported: `GS ( k pL size`.
        The size parameter 3 gives the normal QR code, any other value
        the large one.
        """
        params = self.get_params(args)
        if params[:1] != ["k"]:
            LOGGER.debug("Function not supported: %s", params)
            return style

        self.log_action(QR_CODE_GENERATED)
        size = QR_SIZE_NORMAL if params[2:3] == ["3"] else QR_SIZE_LARGE
        self.tokens.append(QRPlaceholder(size, style))
        return style

    def ignore_command(self, style, *args):
        """Unknown command or sub-command: nothing is done"""
        LOGGER.debug("Ignore command: %s", " ".join(args))
        return style

    def run_instruction(self, style, tree):
        """Call the method matching the given instruction

        :param style: Current style context.
        :param tree: Lark tree of the instruction; we use aliases as method names.
        :type style: StyleContext
        :type tree: lark.tree.Tree
        :return: Style context for the next instructions.
        :rtype: StyleContext
        """
        if tree.data not in self.dir:
            LOGGER.warning(
                "Command not implemented: %s; line: %s",
                tree.data,
                tree.children[0].line,
            )
            return style

        LOGGER.debug("%s: %s", tree.data, tree.children)
        # Call the method and send the tokens as arguments
        return getattr(self, tree.data)(style, *tree.children)

    def run_script(self, script):
        """Parse the script & build the receipt tokens

        This function is the entry point of the parser.
        """
        parse_tree = init_parser(script)

        style = self.style
        for instruction in parse_tree.children:
            style = self.run_instruction(style, instruction)

        self.style = style


def parse_commands(script) -> tuple[list[TextRun | QRPlaceholder], list[str]]:
    """Interpret the given script

    :param script: Command script to be parsed.
    :type script: str
    :return: Tuple of output tokens and action log.
    """
    parser = ReceiptParser(script)
    return parser.tokens, parser.action_log
