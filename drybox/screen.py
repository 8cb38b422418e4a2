"""A 128x64 monochrome display model and the drybox drawing routines."""

from __future__ import annotations

import math
from dataclasses import dataclass

from drybox.state import DryBox, TemperatureUnit

SCREEN_WIDTH = 128
SCREEN_HEIGHT = 64

FREE_MONO_9PT = "FreeMono9pt7b"

# (glyph advance, line height) in pixels at text size 1
_FONT_METRICS: dict[str | None, tuple[int, int]] = {
    None: (6, 8),
    FREE_MONO_9PT: (11, 18),
}

_MAX_TEMPERATURE = 70.0


def _row(hex_bytes: str) -> bytes:
    return bytes.fromhex(hex_bytes).ljust(SCREEN_WIDTH // 8, b"\x00")


_BLANK = _row("")

LOGO: bytes = b"".join(
    [_BLANK] * 6
    + [
        _row("00 00 00 01 f0"),
        _row("00 00 00 07 fc"),
        _row("00 00 00 1f ff"),
        _row("00 00 00 7f 1f c0"),
        _row("00 00 01 fc 07 f0"),
        _row("00 00 07 f0 01 fc"),
        _row("00 00 1f c0 00 7f"),
        _row("00 00 3f 00 00 1f 80"),
        _row("00 00 3c 00 00 07 80"),
        _row("00 00 38 00 00 03 80 00 18 00 c0 00 03"),
        _row("00 00 38 c1 80 03 80 00 18 00 c0 00 03"),
        _row("00 00 38 c1 80 03 80 00 00 00 00 00 03"),
        _row("00 00 38 c1 9b 83 83 c3 98 f6 cd c1 c3"),
        _row("00 00 38 c1 9f c3 87 e7 99 fe cf e3 e3"),
        _row("00 00 38 c1 9c e3 8e 76 1b 8e ce 70 33"),
        _row("00 00 38 c1 98 63 8c 36 1b 06 cc 30 33"),
        _row("00 00 38 c1 98 63 8c 36 1b 06 cc 33 f3"),
        _row("00 00 38 c1 98 63 8c 36 1b 06 cc 36 33"),
        _row("00 00 38 e3 98 63 8e 76 1b 8e cc 36 33"),
        _row("00 00 38 7f 18 63 87 e6 19 fe cc 36 73"),
        _row("00 00 38 3e 18 63 83 c6 18 f6 cc 33 d3"),
        _row("00 00 38 00 00 03 80 00 00 06"),
        _row("00 00 38 00 00 03 80 00 01 8c"),
        _row("00 00 3c 00 00 07 80 00 01 fc"),
        _row("00 00 3f 00 00 1f 87 c0 00 f8"),
        _row("00 00 1f c0 00 7f 0f e0"),
        _row("00 00 07 f0 01 fc 0c 70"),
        _row("00 00 01 fc 07 f0 0c 33 b0 cf 0e"),
        _row("00 00 00 ff 1f e0 0c 37 b0 d9 9f"),
        _row("00 00 00 ff ff e0 0c 77 30 d8 01 80"),
        _row("00 00 00 ff ff e0 0f e6 30 dc 01 80"),
        _row("00 00 03 ff ff f8 0f c6 30 cf 1f 80"),
        _row("00 00 07 ff ff fc 0c 06 30 c3 b1 80"),
        _row("00 00 07 ff ff fc 0c 06 39 c1 b1 80"),
        _row("00 00 03 ff ff f8 0c 06 1f 99 b3 80"),
        _row("00 00 00 ff ff e0 0c 06 0f 0f 1e 80"),
        _row("00 00 00 ff ff e0"),
        _row("00 00 03 ff ff f8"),
        _row("00 00 07 ff ff fc"),
        _row("00 00 07 ff ff fc 0f e0 00 06"),
        _row("00 00 03 ff ff f8 0f f0 00 06"),
        _row("00 00 00 ff ff e0 0c 38 00 06"),
        _row("00 00 00 ff ff e0 0c 1c e0 06 e0 f1 86"),
        _row("00 00 03 ff ff f8 0c 0d e6 37 f1 f9 ce"),
        _row("00 00 07 ff ff fc 0c 0d 86 37 3b 9c fc"),
        _row("00 00 07 ff ff fc 0c 0d 86 36 1b 0c 78"),
        _row("00 00 03 ff ff f8 0c 0d 83 66 1b 0c 30"),
        _row("00 00 00 ff ff e0 0c 1d 83 66 1b 0c 78"),
        _row("00 00 00 ff ff e0 0c 39 81 e7 3b 9c fc"),
        _row("00 00 00 ff ff e0 0f f1 81 c7 f1 f9 ce"),
        _row("00 00 00 7f ff c0 0f e1 80 c7 e0 f1 86"),
        _row("00 00 00 1f ff 00 00 00 01 80"),
        _row("00 00 00 03 f8 00 00 00 03 80"),
        _row("00 00 00 00 00 00 00 00 07"),
        _row("00 00 00 00 00 00 00 00 06"),
    ]
    + [_BLANK] * 3
)


@dataclass
class _TextRun:
    x: int
    y: int
    text: str = ""


class Screen:
    """In-memory monochrome display with a cursor-based text model."""

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT) -> None:
        self.width = width
        self.height = height
        self.cursor_x = 0
        self.cursor_y = 0
        self.text_size = 1
        self.font: str | None = None
        self.frame_count = 0
        self.last_frame: frozenset[tuple[int, int]] = frozenset()
        self.last_text = ""
        self._lit: set[tuple[int, int]] = set()
        self._runs: list[_TextRun] = []
        self._run: _TextRun | None = None

    def clear(self) -> None:
        """Blank the drawing buffer and forget all printed text."""
        self._lit.clear()
        self._runs.clear()
        self._run = None

    def set_cursor(self, x: int, y: int) -> None:
        self.cursor_x = x
        self.cursor_y = y
        self._run = None

    def set_text_size(self, size: int) -> None:
        self.text_size = max(1, size)
        self._run = None

    def set_font(self, font: str | None) -> None:
        if font not in _FONT_METRICS:
            raise ValueError(f"unknown font: {font!r}")
        self.font = font
        self._run = None

    def _metrics(self) -> tuple[int, int]:
        advance, line = _FONT_METRICS[self.font]
        return advance * self.text_size, line * self.text_size

    def _newline(self) -> None:
        _, line = self._metrics()
        self.cursor_x = 0
        self.cursor_y += line
        self._run = None

    def print(self, text: object) -> None:
        """Print text at the cursor, wrapping at the right edge."""
        advance, _ = self._metrics()
        for char in str(text):
            if char == "\n":
                self._newline()
                continue
            if char == "\r":
                continue
            if self.cursor_x + advance > self.width:
                self._newline()
            if self._run is None:
                self._run = _TextRun(self.cursor_x, self.cursor_y)
                self._runs.append(self._run)
            self._run.text += char
            self.cursor_x += advance

    def pixel(self, x: int, y: int) -> bool:
        """Whether the pixel at (x, y) is lit; off-screen pixels are dark."""
        return (x, y) in self._lit

    def set_pixel(self, x: int, y: int, on: bool = True) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return
        if on:
            self._lit.add((x, y))
        else:
            self._lit.discard((x, y))

    def draw_line(self, x0: int, y0: int, x1: int, y1: int, on: bool = True) -> None:
        dx = abs(x1 - x0)
        dy = -abs(y1 - y0)
        sx = 1 if x0 < x1 else -1
        sy = 1 if y0 < y1 else -1
        err = dx + dy
        while True:
            self.set_pixel(x0, y0, on)
            if x0 == x1 and y0 == y1:
                break
            e2 = 2 * err
            if e2 >= dy:
                err += dy
                x0 += sx
            if e2 <= dx:
                err += dx
                y0 += sy

    def fill_circle(self, cx: int, cy: int, radius: int, on: bool = True) -> None:
        for dy in range(-radius, radius + 1):
            half = math.isqrt(radius * radius - dy * dy)
            for x in range(cx - half, cx + half + 1):
                self.set_pixel(x, cy + dy, on)

    def draw_bitmap(
        self, x: int, y: int, bitmap: bytes, width: int, height: int, on: bool = True
    ) -> None:
        """Draw a row-major, MSB-first 1-bit bitmap; clear bits are left alone."""
        byte_width = (width + 7) // 8
        for row in range(height):
            line = bitmap[row * byte_width:(row + 1) * byte_width]
            for col in range(width):
                if line[col // 8] & (0x80 >> (col % 8)):
                    self.set_pixel(x + col, y + row, on)

    def show(self) -> None:
        """Push the drawing buffer to the visible frame."""
        self.frame_count += 1
        self.last_frame = frozenset(self._lit)
        self.last_text = self.text()

    def text(self) -> str:
        """Printed text, one line per run, ordered top to bottom."""
        ordered = sorted(self._runs, key=lambda run: (run.y, run.x))
        return "\n".join(run.text for run in ordered)


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def format_temperature(
    temperature: float,
    round_value: bool,
    calibration: float,
    unit: TemperatureUnit,
) -> str:
    """Format a Celsius temperature for display, calibrated and capped at 70 C."""
    temp = min(temperature + calibration, _MAX_TEMPERATURE)
    if unit is TemperatureUnit.FAHRENHEIT:
        temp = temp * 9.0 / 5.0 + 32.0
    if round_value:
        temp = _round_half_away(temp)
    return f"{temp:.1f}{unit.value}"


def format_humidity(humidity: float) -> str:
    """Format a relative humidity into a five-character field ending in '%'."""
    text = f"{humidity:.1f}"
    if humidity < 10:
        text = " " + text
    return text[:4].ljust(4) + "%"


def draw_logo(screen: Screen) -> None:
    screen.clear()
    screen.draw_bitmap(0, 0, LOGO, SCREEN_WIDTH, SCREEN_HEIGHT, True)
    screen.show()


def draw_heater_on(screen: Screen, heater_on: bool) -> None:
    """Draw the heater indicator: filled when on, a ring when off."""
    screen.fill_circle(114, 6, 5, True)
    if not heater_on:
        screen.fill_circle(114, 6, 4, False)


def prepare_screen(screen: Screen, box: DryBox) -> None:
    """Clear the screen and draw the header with targets and heater status."""
    settings = box.settings
    screen.clear()
    screen.set_font(None)
    screen.set_text_size(1)
    screen.set_cursor(0, 3)
    target_temp = format_temperature(
        settings.target_temp, True, settings.temperature_calibration, settings.unit
    )
    target_hum = format_humidity(settings.target_humidity)
    screen.print(target_temp)
    screen.print(" ")
    screen.print(target_hum)
    screen.draw_line(0, 13, 126, 13, True)
    draw_heater_on(screen, box.heater_on)