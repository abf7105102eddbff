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
"""Render receipt tokens into a PDF file"""
# Standard imports
from pathlib import Path

# Custom imports
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

# Local imports
from receiptparser import __version__
from receiptparser.commons import PAGESIZE_MAPPING, DEFAULT_PAGESIZE, logger
from receiptparser.styles import (
    Alignment,
    QRPlaceholder,
    SizeScale,
)

LOGGER = logger()

# Pixels of the QR placeholders are CSS pixels (1/96 inch)
PIXEL_TO_POINT = 72 / 96


class ReceiptRenderer:
    """Draw a receipt on a single PDF page whose height fits the content

    Text tokens are concatenated like on the paper roll: a line ends with a
    line terminator only. QR placeholders are drawn as centered blocks.
    """

    line_spacing = 1.2

    def __init__(
        self,
        tokens,
        page_size=DEFAULT_PAGESIZE,
        output_file="receipt.pdf",
        font="Courier",
        bold_font="Courier-Bold",
        font_size=8.0,
        margins_mm=(4, 4, 3, 3),
        **_,
    ):
        """

        :param tokens: Tokens built by :class:`receiptparser.parser.ReceiptParser`.
        :key page_size: Paper roll width alias (58mm, 80mm, 112mm).
        :key output_file: Output filepath or binary file object.
            (default: receipt.pdf).
        :key font: Name of the regular font (reportlab standard font).
        :key bold_font: Name of the bold font (reportlab standard font).
        :key font_size: Default point size.
        :key margins_mm: Margins in mm (top, bottom, left, right).
        :type tokens: list[TextRun | QRPlaceholder]
        :type page_size: str
        :type output_file: io.BufferedWriter | str | Path
        :type font_size: float
        :type margins_mm: tuple[float]
        """
        self.tokens = tokens
        self.page_width = PAGESIZE_MAPPING[page_size]
        self.output_file = output_file
        self.font = font
        self.bold_font = bold_font
        self.font_size = font_size
        self.top_margin, self.bottom_margin, self.left_margin, self.right_margin = (
            margin * mm for margin in margins_mm
        )
        self.printable_width = self.page_width - self.left_margin - self.right_margin
        self.current_pdf = None

    def get_point_size(self, style) -> float:
        """Get the point size for the given style

        The GS ! scale takes precedence over the ESC ! magnification.
        """
        if style.character_scale is not None:
            return self.font_size * style.character_scale
        if style.size_scale != SizeScale.NORMAL:
            return self.font_size * 2
        return self.font_size

    @staticmethod
    def get_horizontal_scale(style) -> float:
        """Get the horizontal scale coefficient (in percent)

        Double-height only: the point size is doubled, the width must be halved.
        """
        if style.character_scale is None and style.size_scale == SizeScale.DOUBLE_HEIGHT:
            return 50
        return 100

    def get_fontname(self, style) -> str:
        return self.bold_font if style.bold else self.font

    def fragment_width(self, text, style) -> float:
        """Get the width of the given text with the given style, in points"""
        width = stringWidth(text, self.get_fontname(style), self.get_point_size(style))
        return width * self.get_horizontal_scale(style) / 100

    def qr_side(self, token) -> float:
        """Get the side of the QR placeholder, limited to the printable width"""
        return min(token.size * PIXEL_TO_POINT, self.printable_width)

    def build_lines(self) -> list:
        """Group the tokens into lines

        :return: List of lines. A line is either a QRPlaceholder, or a list of
            (text, style) fragments (can be empty).
        """
        lines = []
        current_line = []
        for token in self.tokens:
            if isinstance(token, QRPlaceholder):
                if current_line:
                    lines.append(current_line)
                    current_line = []
                lines.append(token)
                continue

            *full_lines, remaining = token.content.split("\n")
            for text in full_lines:
                if text:
                    current_line.append((text, token.style))
                lines.append(current_line)
                current_line = []
            if remaining:
                current_line.append((remaining, token.style))

        if current_line:
            lines.append(current_line)
        return lines

    def line_height(self, line) -> float:
        """Get the height of the given line, in points"""
        if isinstance(line, QRPlaceholder):
            return self.qr_side(line) + 2 * 10 * PIXEL_TO_POINT

        heights = [self.font_size * self.line_spacing]
        for text, style in line:
            if style.rotated90:
                heights.append(self.fragment_width(text, style))
            else:
                heights.append(self.get_point_size(style) * self.line_spacing)
        return max(heights)

    def draw_text_line(self, line, cursor_y):
        """Draw fragments of text on the baseline `cursor_y`

        The alignment of the first fragment is used for the whole line.
        """
        if not line:
            return

        line_width = sum(
            self.get_point_size(style) if style.rotated90 else self.fragment_width(text, style)
            for text, style in line
        )
        alignment = line[0][1].alignment
        if alignment == Alignment.CENTER:
            cursor_x = self.left_margin + (self.printable_width - line_width) / 2
        elif alignment == Alignment.RIGHT:
            cursor_x = self.page_width - self.right_margin - line_width
        else:
            cursor_x = self.left_margin

        for text, style in line:
            point_size = self.get_point_size(style)
            width = self.fragment_width(text, style)

            if style.rotated90:
                # Counter-clockwise; the text goes up from the baseline
                self.current_pdf.saveState()
                self.current_pdf.translate(cursor_x + point_size, cursor_y)
                self.current_pdf.rotate(90)
                self.draw_fragment(text, style, 0, 0, width)
                self.current_pdf.restoreState()
                cursor_x += point_size
                continue

            self.draw_fragment(text, style, cursor_x, cursor_y, width)
            cursor_x += width

    def draw_fragment(self, text, style, cursor_x, cursor_y, width):
        """Draw one piece of text and its scoring lines"""
        point_size = self.get_point_size(style)
        textobject = self.current_pdf.beginText(cursor_x, cursor_y)
        textobject.setFont(self.get_fontname(style), point_size)
        textobject.setHorizScale(self.get_horizontal_scale(style))
        textobject.textOut(text)
        self.current_pdf.drawText(textobject)

        if style.underline:
            offset_y = cursor_y - point_size / 6
            self.current_pdf.line(cursor_x, offset_y, cursor_x + width, offset_y)
        if style.strike:
            offset_y = cursor_y + point_size / 4
            self.current_pdf.line(cursor_x, offset_y, cursor_x + width, offset_y)

    def draw_qr_placeholder(self, token, top_y):
        """Draw a fake QR code: a grid pattern, a frame & 3 finder squares

        :param token: The QR placeholder.
        :param top_y: Vertical position of the top of the block.
        """
        side = self.qr_side(token)
        x = self.left_margin + (self.printable_width - side) / 2
        # Bottom of the square, below the top margin of the block
        y = top_y - 10 * PIXEL_TO_POINT - side
        cell = side / 5
        pdf = self.current_pdf

        pdf.saveState()
        pdf.setFillColorRGB(0, 0, 0)
        # Grid pattern
        for i in range(5):
            pdf.rect(x + i * cell, y, cell / 4, side, stroke=0, fill=1)
            pdf.rect(x, y + i * cell, side, cell / 4, stroke=0, fill=1)
        # Frame
        pdf.setLineWidth(4 * PIXEL_TO_POINT)
        pdf.rect(x + side * 0.1, y + side * 0.1, side * 0.8, side * 0.8, stroke=1, fill=0)
        # Finder squares: top left, top right, bottom left
        finder = side * 0.2
        pdf.rect(x + side * 0.2, y + side * 0.6, finder, finder, stroke=0, fill=1)
        pdf.rect(x + side * 0.6, y + side * 0.6, finder, finder, stroke=0, fill=1)
        pdf.rect(x + side * 0.2, y + side * 0.2, finder, finder, stroke=0, fill=1)
        pdf.restoreState()

    def render(self):
        """Build the PDF file"""
        lines = self.build_lines()
        heights = [self.line_height(line) for line in lines]
        page_height = self.top_margin + sum(heights) + self.bottom_margin

        LOGGER.debug(
            "page size, height, width: %s x %s; lines: %d",
            page_height, self.page_width, len(lines)
        )

        # Support of argparse file descriptor vs default str/Path
        output_file = self.output_file
        if isinstance(output_file, Path):
            output_file = str(output_file)
        self.current_pdf = Canvas(
            output_file, pagesize=(self.page_width, page_height), pageCompression=1
        )
        self.current_pdf.setLineWidth(0.5)
        self.current_pdf.setProducer(f"ReceiptPy {__version__}")

        # Absolute position from the page bottom edge
        cursor_y = page_height - self.top_margin
        for line, height in zip(lines, heights):
            if isinstance(line, QRPlaceholder):
                self.draw_qr_placeholder(line, cursor_y)
            else:
                # Baseline at the bottom of the line, above the descenders
                self.draw_text_line(line, cursor_y - height + height / 4)
            cursor_y -= height

        self.current_pdf.showPage()
        self.current_pdf.save()
        LOGGER.info("Receipt saved: %s", self.output_file)
