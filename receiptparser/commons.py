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
"""Logger settings and project constants"""

# Standard imports
from logging.handlers import RotatingFileHandler
from pathlib import Path
import logging
import datetime as dt
import tempfile

# Custom imports
from reportlab.lib.units import mm


# Paths
DIR_LOGS = tempfile.gettempdir() + "/"
CONFIG_FILENAME = "receiptpy.conf"
EMBEDDED_CONFIG_FILE = Path(__file__).parent / CONFIG_FILENAME
USER_CONFIG_FILE = Path.home() / ".local/share/receiptpy" / CONFIG_FILENAME
# Search order of the configuration file
CONFIG_FILES = (Path(CONFIG_FILENAME), USER_CONFIG_FILE)

# Paper roll widths in points (1/72 inch)
PAGESIZE_MAPPING = {
    "58mm": 58 * mm,
    "80mm": 80 * mm,
    "112mm": 112 * mm,
}
DEFAULT_PAGESIZE = "80mm"

# Action log messages
PRINTER_INITIALIZED = "Printer Initialized"
CASH_DRAWER_OPENED = "Cash Drawer Opened"
PAPER_CUT = "Paper Cut"
QR_CODE_GENERATED = "QR Code Generated"

# Text emitted in place of the paper cut
CUT_PAPER_TEXT = "--- Cut Paper ---\n"

# QR placeholder sizes in pixels
QR_SIZE_NORMAL = 100
QR_SIZE_LARGE = 200

# Default receipt used when no script is given
SAMPLE_SCRIPT = """ESC @
ESC ! 00
ESC a 01
The Cozy Corner Cafe
LF
123 Main Street, Anytown
LF
Tel: (555) 123-4567
LF
LF
ESC a 00
------------------------------------------
Item            Qty    Price     Total
------------------------------------------
Coffee          2      2.50      5.00
Sandwich        1      5.00      5.00
Cake            3      3.00      9.00
------------------------------------------
Subtotal:                         19.00
Tax (10%):                        1.90
------------------------------------------
Total:                           20.90
------------------------------------------
Thank you for visiting The Cozy Corner Cafe!
LF
LF
ESC d 3
GS V 0"""

# Logging
LOGGER_NAME = "receiptparser"
LOG_LEVEL = "INFO"

################################################################################


def logger(name=LOGGER_NAME):
    """Return logger of given name, without initialize it.

    Equivalent of logging.getLogger() call.
    """
    logger_obj = logging.getLogger(name)
    fmt_str = "%(levelname)s: [%(filename)s:%(lineno)s:%(funcName)s()] %(message)s"
    logging.basicConfig(format=fmt_str)
    return logger_obj


_logger = logging.getLogger(LOGGER_NAME)


# log file
formatter = logging.Formatter(
    "%(asctime)s :: %(levelname)s :: [%(filename)s:%(lineno)s:%(funcName)s()] :: %(message)s"
)
file_handler = RotatingFileHandler(
    DIR_LOGS
    + LOGGER_NAME
    + "_"
    + dt.datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    + ".log",
    "a",
    100_000_000,
    1,
    delay=True,
)
file_handler.setFormatter(formatter)
_logger.addHandler(file_handler)


def log_level(level):
    """Set terminal/file log level to the given one.

    .. note:: Don't forget the propagation system of messages:
        From logger to handlers. Handlers receive log messages only if
        the main logger doesn't filter them.
    """
    level = level.upper()
    if level == "NONE":
        # Override all severity levels under CRITICAL
        logging.disable()
        return
    else:
        # Remove the overriding level
        logging.disable(logging.NOTSET)
    # Main logger
    _logger.setLevel(level)
    # Handlers
    _ = [
        handler.setLevel(level)
        for handler in _logger.handlers
        if handler.__class__
        in (logging.StreamHandler, logging.handlers.RotatingFileHandler)
    ]


log_level(LOG_LEVEL)
