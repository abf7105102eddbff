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
"""ReceiptPy entry point"""

# Standard imports
import argparse
from pathlib import Path
import shutil

# Custom imports
from receiptparser import __version__
from receiptparser.config_parser import load_config, build_renderer_params
from receiptparser.parser import ReceiptParser
from receiptparser.renderer import ReceiptRenderer
import receiptparser.commons as cm
from receiptparser.commons import (
    CONFIG_FILES,
    USER_CONFIG_FILE,
    EMBEDDED_CONFIG_FILE,
    PAGESIZE_MAPPING,
    SAMPLE_SCRIPT,
)

LOGGER = cm.logger()


def choose_config_file(config_file: Path | None) -> Path:
    """Get an existing configuration file

    Search the config file in the current directory, then in `~/.local/share/receiptpy`.
    If none has been found: create a config file from the embedded one, in the
    user configuration folder and use it.

    :param config_file: Configuration file path from the cli. Can be None if the
        argument is not used.
    :return: A Path for a valid configuration file, ready to be loaded in the
        ConfigParser.
    """
    if isinstance(config_file, Path):
        # Config file from command line
        if not config_file.exists():
            LOGGER.critical("Configuration file <%s> not found!", config_file)
            raise SystemExit
        return config_file

    # Search the config file in the current directory, then in ~/.local/share/
    g = [path for path in CONFIG_FILES if path.exists()]
    if not g:
        # If none has been found: create the config file from the embedded one
        LOGGER.info("Initialize new default config at <%s>", USER_CONFIG_FILE)
        USER_CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy(EMBEDDED_CONFIG_FILE, USER_CONFIG_FILE)
        return USER_CONFIG_FILE

    # Use the first file found
    config_file = g[0]
    LOGGER.info("Use config at <%s>", config_file)
    return config_file


def receiptparser_entry_point(**kwargs):
    """The main routine.

    The action log is printed on stdout; the receipt is saved as a PDF file
    unless the `pdf` keyword is False.

    :return: The parser object, with tokens and action log.
    :rtype: ReceiptParser
    """
    if script_file := kwargs.get("script"):
        with script_file:
            script = script_file.read()
    else:
        script = SAMPLE_SCRIPT

    # Parse the config file
    config = load_config(config_file=kwargs["config"])
    params = build_renderer_params(config)
    if page_size := kwargs.get("page_size"):
        params["page_size"] = page_size

    LOGGER.info("ReceiptPy start; %s", __version__)
    receipt = ReceiptParser(script)

    for message in receipt.action_log:
        print(message)

    if kwargs.get("pdf", True):
        ReceiptRenderer(receipt.tokens, output_file=kwargs["output"], **params).render()

    return receipt


def args_to_params(args):  # pragma: no cover
    """Return argparse namespace as a dict {variable name: value}"""
    return dict(vars(args).items())


def main():  # pragma: no cover
    """Entry point and argument parser"""
    parser = argparse.ArgumentParser(
        prog="receiptpy",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        "script",
        nargs="?",
        help="Command script file. - to read from stdin. "
            "(default: built-in sample receipt)",
        type=argparse.FileType("r"),
        default=None,
    )

    parser.add_argument(
        "-p",
        "--page_size",
        help="Width of the paper roll. (default: from the configuration file)",
        choices=tuple(PAGESIZE_MAPPING),
        default=argparse.SUPPRESS,  # Absent by default (handled later)
    )

    parser.add_argument(
        "-o",
        "--output",
        help="PDF output file.",
        type=Path,
        default=Path("receipt.pdf"),
    )

    parser.add_argument(
        "--pdf",
        help="Enable the PDF rendering.",
        default=True,
        action=argparse.BooleanOptionalAction
    )

    parser.add_argument(
        "-c",
        "--config",
        nargs="?",
        help="Configuration file to use. "
            "(default: ./receiptpy.conf, ~/.local/share/receiptpy/receiptpy.conf)",
        default=argparse.SUPPRESS,  # Absent by default (handled later)
        type=Path,
    )

    parser.add_argument(
        "-v", "--version", action="version", version=__version__
    )

    # Get program args and launch associated command
    args = parser.parse_args()

    params = args_to_params(args)

    # Handle configuration file
    params["config"] = choose_config_file(params.get("config"))

    # Do magic
    receiptparser_entry_point(**params)


if __name__ == "__main__":  # pragma: no cover
    main()
