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
"""Text style context and output tokens emitted by the interpreter"""
# Standard imports
from dataclasses import dataclass, replace
from enum import Enum


class SizeScale(Enum):
    """Character magnification selected by ESC !"""

    NORMAL = 0
    DOUBLE_HEIGHT = 1
    DOUBLE_WIDTH_HEIGHT = 2


class WidthMode(Enum):
    """Character width selected by ESC !"""

    NORMAL = 0
    DOUBLE_WIDTH = 1


class Alignment(Enum):
    """Justification enumeration - ESC a"""

    LEFT = 0
    CENTER = 1
    RIGHT = 2


@dataclass(frozen=True)
class StyleContext:
    """Current text formatting applied to subsequent text

    The object is immutable: handlers build an updated copy with
    :meth:`update`, so a style captured by a token is never modified afterwards.

    :param bold: Bold weight (ESC ! bit 3, ESC E).
    :param size_scale: Discrete magnification (ESC !).
    :param width_mode: Double-width flag (ESC !).
    :param alignment: Justification of the line (ESC a).
    :param underline: Underline (ESC -).
    :param strike: Double-strike, rendered as a line-through (ESC G).
    :param rotated90: 90° counter-clockwise rotation (ESC V).
    :param emphasized: Emphasized mode (ESC E).
    :param character_scale: Continuous font scale (GS !);
        None if never set.
    """

    bold: bool = False
    size_scale: SizeScale = SizeScale.NORMAL
    width_mode: WidthMode = WidthMode.NORMAL
    alignment: Alignment = Alignment.LEFT
    underline: bool = False
    strike: bool = False
    rotated90: bool = False
    emphasized: bool = False
    character_scale: float | None = None

    def update(self, **changes) -> "StyleContext":
        """Return a copy of the style with the given attributes modified"""
        return replace(self, **changes)


@dataclass(frozen=True)
class TextRun:
    """Styled text; content includes the trailing line terminator"""

    content: str
    style: StyleContext


@dataclass(frozen=True)
class QRPlaceholder:
    """Fixed-size QR code graphic (size in pixels)"""

    size: int
    style: StyleContext
