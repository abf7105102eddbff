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
"""Load configuration file, check and set default values"""

# Standard imports
import configparser
from logging import DEBUG

# Local imports
from receiptparser.commons import (
    logger,
    log_level,
    EMBEDDED_CONFIG_FILE,
    LOG_LEVEL,
    PAGESIZE_MAPPING,
    DEFAULT_PAGESIZE,
)

LOGGER = logger()


def load_config(config_file=EMBEDDED_CONFIG_FILE):
    """Load configuration file and set default settings

    :key config_file: Path of the configuration file to load.
        Default: EMBEDDED_CONFIG_FILE from commons module.
    :type config_file: Path
    :return: Configuration updated object.
    :rtype: configparser.ConfigParser
    """
    config = configparser.ConfigParser(allow_no_value=True)
    config.read(config_file)
    return parse_config(config)


def parse_config(config: configparser.ConfigParser):
    """Read config file, check and set default values

    .. note:: All values are of type string; they must be cast
        (with dedicated methods) if necessary.

        The syntax `if not xxx:` handles None and '' data retrieved from file.

    :param config: Opened ConfigParser object
    :type config: configparser.ConfigParser
    :return: Processed ConfigParser object
    :rtype: configparser.ConfigParser
    """

    def isfloat(string):
        """Return True if the str can be cast to float"""
        try:
            float(string)
            return True
        except ValueError:
            return False

    ## Misc section
    if not config.has_section("misc"):
        config.add_section("misc")

    misc_section = config["misc"]
    loglevel = misc_section.get("loglevel")
    if not loglevel:
        misc_section["loglevel"] = LOG_LEVEL
    log_level(misc_section["loglevel"])

    page_size = misc_section.get("page_size")
    if not page_size:
        misc_section["page_size"] = DEFAULT_PAGESIZE
    elif page_size not in PAGESIZE_MAPPING:
        LOGGER.error(
            "page_size: A known alias is expected (%s) (%s).",
            ", ".join(PAGESIZE_MAPPING),
            page_size,
        )
        raise SystemExit


    ## Renderer section
    if not config.has_section("renderer"):
        config.add_section("renderer")

    renderer_section = config["renderer"]
    if not renderer_section.get("font"):
        renderer_section["font"] = "Courier"
    if not renderer_section.get("bold_font"):
        renderer_section["bold_font"] = "Courier-Bold"

    font_size = renderer_section.get("font_size")
    if not font_size:
        renderer_section["font_size"] = "8"
    elif not isfloat(font_size) or float(font_size) <= 0:
        LOGGER.error("font_size: A positive number is expected (%s).", font_size)
        raise SystemExit

    margins_mm = renderer_section.get("margins_mm")
    if not margins_mm:
        renderer_section["margins_mm"] = "4,4,3,3"
    else:
        cleaned_data = margins_mm.split(",")
        if len(cleaned_data) != 4 or not all(isfloat(i) for i in cleaned_data):
            LOGGER.error(
                "margins_mm: 4 values are expected "
                "(top, bottom, left, right) (%s).",
                margins_mm,
            )
            raise SystemExit

    debug_config_file(config)
    return config


def debug_config_file(config: configparser.ConfigParser):
    """Display sections, keys and values of config file

    :param config: Opened ConfigParser object
    :type config: configparser.ConfigParser
    """
    if LOGGER.level > DEBUG:
        return
    for section in config.sections():
        LOGGER.debug("[%s]", section)

        for key, value in config[section].items():
            LOGGER.debug("%s : %s", key, value)

        LOGGER.debug("")


def build_renderer_params(config) -> dict:
    """Get dict of params that match the kwargs of ReceiptRenderer object.

    :param config: Configuration object.
    :type config: configparser.ConfigParser
    """
    misc_section = config["misc"]
    renderer_section = config["renderer"]
    margins_mm = tuple(map(float, renderer_section["margins_mm"].split(",")))

    return {
        "page_size": misc_section["page_size"],
        "font": renderer_section["font"],
        "bold_font": renderer_section["bold_font"],
        "font_size": renderer_section.getfloat("font_size"),
        "margins_mm": margins_mm,
    }
