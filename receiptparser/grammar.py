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
"""Grammar definition and tokenization of command scripts

A script is made of lines; each line is either blank, a literal text,
or a command whose first word is a keyword (LF, ESC, GS) followed by
whitespace-separated arguments.
The tokenization is made by :class:`ScriptLexer` which feeds the LALR parser
with typed tokens; the sub-command symbol that follows ESC or GS is
translated into a terminal type according to the keyword.
"""
# Standard imports
from functools import lru_cache
from logging import DEBUG

# Custom imports
from lark import Lark, Token
from lark.lexer import Lexer

# Local imports
from receiptparser.commons import logger


LOGGER = logger()

# Sub-commands symbols are case-sensitive: "a" (justification) is not "A"
ESC_COMMANDS = {
    "@": "INIT",
    "!": "MASTER_SELECT",
    "E": "EMPHASIS",
    "a": "JUSTIFICATION",
    "-": "UNDERLINE",
    "G": "DOUBLE_STRIKE",
    "V": "ROTATION",
    "p": "PULSE",
    "d": "FEED_LINES",
    "J": "FEED_PAPER",
    "M": "CHARACTER_FONT",
    "t": "CODE_TABLE",
}

GS_COMMANDS = {
    "!": "CHARACTER_SIZE",
    "V": "CUT",
    "(": "FUNCTION",
    "B": "REVERSE",
    "k": "BARCODE",
}

COMMAND_TABLES = {
    "ESC": ESC_COMMANDS,
    "GS": GS_COMMANDS,
}

receipt_grammar = r"""
    start: instruction*

    instruction: LF ARG*                -> line_feed
        | TEXT                          -> print_text

        # ESC commands
        | ESC INIT ARG*                 -> reset_printer
        | ESC MASTER_SELECT ARG*        -> master_select
        | ESC EMPHASIS ARG*             -> switch_emphasis
        | ESC JUSTIFICATION ARG*        -> select_justification
        | ESC UNDERLINE ARG*            -> switch_underline
        | ESC DOUBLE_STRIKE ARG*        -> switch_double_strike
        | ESC ROTATION ARG*             -> switch_rotation
        | ESC PULSE ARG*                -> generate_pulse
        # not implemented
        | ESC FEED_LINES ARG*           -> print_and_feed_lines
        # not implemented
        | ESC FEED_PAPER ARG*           -> print_and_feed_paper
        # not implemented
        | ESC CHARACTER_FONT ARG*       -> select_character_font
        # not implemented
        | ESC CODE_TABLE ARG*           -> select_character_code_table
        | ESC UNKNOWN ARG*              -> ignore_command
        | ESC                           -> ignore_command

        # GS commands
        | GS CHARACTER_SIZE ARG*        -> select_character_size
        | GS CUT ARG*                   -> cut_paper
        | GS FUNCTION ARG*              -> select_function
        # not implemented
        | GS REVERSE ARG*               -> switch_reverse_printing
        # not implemented
        | GS BARCODE ARG*               -> print_barcode
        | GS UNKNOWN ARG*               -> ignore_command
        | GS                            -> ignore_command

    # Terminals are built by ScriptLexer
    %declare LF TEXT ARG ESC GS UNKNOWN
    %declare INIT MASTER_SELECT EMPHASIS JUSTIFICATION UNDERLINE DOUBLE_STRIKE
    %declare ROTATION PULSE FEED_LINES FEED_PAPER CHARACTER_FONT CODE_TABLE
    %declare CHARACTER_SIZE CUT FUNCTION REVERSE BARCODE
"""


class ScriptLexer(Lexer):
    """Split a script into lines, and lines into typed tokens

    Emitted tokens:

    - LF line: LF token followed by ARG tokens.
    - ESC/GS line: keyword token, then (if any) a sub-command token typed
      with the keyword table (UNKNOWN for unexpected symbols),
      then ARG tokens.
    - other non-blank line: TEXT token with the untouched line as value.

    Lines are delimited by line feeds only; a trailing carriage return is
    dropped.
    Blank lines are skipped. All tokens carry their line number.
    """

    def __init__(self, lexer_conf):
        pass

    def lex(self, data):
        for line_number, line in enumerate(data.split("\n"), 1):
            line = line.removesuffix("\r")
            words = line.split()
            if not words:
                # Blank line
                continue

            keyword, *params = words
            keyword_type = keyword.upper()

            if keyword_type == "LF":
                yield Token("LF", keyword, line=line_number)
            elif keyword_type in COMMAND_TABLES:
                yield Token(keyword_type, keyword, line=line_number)
                if params:
                    command, *params = params
                    command_type = COMMAND_TABLES[keyword_type].get(command, "UNKNOWN")
                    yield Token(command_type, command, line=line_number)
            else:
                yield Token("TEXT", line, line=line_number)
                continue

            for param in params:
                yield Token("ARG", param, line=line_number)


@lru_cache(maxsize=1)
def build_parser() -> Lark:
    """Get the Lark parser (built once)"""
    return Lark(receipt_grammar, parser="lalr", lexer=ScriptLexer)


def init_parser(script):
    """Call Lark to parse the given script

    :param script: Command script to be parsed.
    :type script: str
    :return: Lark tree.
    :rtype: lark.tree.Tree
    """
    tree = build_parser().parse(script)
    if LOGGER.level == DEBUG:
        LOGGER.debug("\n" + tree.pretty())
    return tree
