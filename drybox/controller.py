"""Main control loop: button debouncing, sensor polling, heater and persistence."""

from __future__ import annotations

import argparse
import struct
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from drybox.menu import build_menus
from drybox.screen import Screen
from drybox.state import ButtonPress, DryBox, Settings, TemperatureUnit

LONG_PRESS_MS = 1000
SENSOR_INTERVAL_MS = 5000
STORAGE_INTERVAL_MS = 60000
TICK_MS = 100
HEATER_HYSTERESIS = 1.5

# Little-endian layout: target temp (f32) @0, target humidity (u16) @4,
# temperature calibration (f32) @8, humidity calibration (f32) @12, unit (char) @16.
_LAYOUT = struct.Struct("<fH2xffc")
SETTINGS_SIZE = _LAYOUT.size


class Sensor(Protocol):
    def temperature(self) -> float: ...

    def humidity(self) -> float: ...


@dataclass
class ButtonHandler:
    """Turns raw button levels into short and long presses, reported on release.

    With a delay of zero every release counts as a short press.
    """

    delay: int = LONG_PRESS_MS
    was_pressed: bool = False
    first_press: int | None = None

    def update(self, pressed: bool, now: int) -> ButtonPress:
        if pressed:
            if self.first_press is None or self.first_press > now:
                self.first_press = now
            self.was_pressed = True
            return ButtonPress.NONE
        if not self.was_pressed:
            return ButtonPress.NONE
        self.was_pressed = False
        if self.delay == 0:
            self.first_press = None
            return ButtonPress.SHORT_PRESS
        elapsed = now - (self.first_press if self.first_press is not None else now)
        if elapsed < self.delay:
            self.first_press = None
            return ButtonPress.SHORT_PRESS
        if elapsed > self.delay:
            self.first_press = None
            return ButtonPress.LONG_PRESS
        # A release exactly at the threshold reports nothing and keeps the start time.
        return ButtonPress.NONE


@dataclass
class StaticSensor:
    """A sensor that always reports the same reading.

    Humidity is reported as a fraction, as the hardware sensor does.
    """

    celsius: float = 25.0
    fraction: float = 0.5

    def temperature(self) -> float:
        return self.celsius

    def humidity(self) -> float:
        return self.fraction


def pack_settings(settings: Settings) -> bytes:
    """Serialise settings into the persistent storage layout."""
    return _LAYOUT.pack(
        settings.target_temp,
        settings.target_humidity,
        settings.temperature_calibration,
        settings.humidity_calibration,
        settings.unit.value.encode("ascii"),
    )


def unpack_settings(data: bytes, settings: Settings) -> Settings:
    """Load settings from the persistent storage layout into ``settings``."""
    if len(data) < SETTINGS_SIZE:
        raise ValueError(f"settings data too short: {len(data)} < {SETTINGS_SIZE} bytes")
    target_temp, target_humidity, temp_cal, hum_cal, unit_byte = _LAYOUT.unpack_from(data)
    try:
        unit = TemperatureUnit(unit_byte.decode("latin-1"))
    except ValueError:
        raise ValueError(f"invalid temperature unit byte: {unit_byte!r}") from None
    settings.target_temp = target_temp
    settings.target_humidity = target_humidity
    settings.temperature_calibration = temp_cal
    settings.humidity_calibration = hum_cal
    settings.unit = unit
    return settings


class SettingsStore:
    """Persistent settings storage, kept in memory and optionally in a file."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self.data: bytes | None = None

    def load(self, settings: Settings) -> bool:
        """Fill ``settings`` from storage; return False if nothing was stored."""
        data = self.data
        if self.path is not None and self.path.exists():
            data = self.path.read_bytes()
        if data is None:
            return False
        unpack_settings(data, settings)
        self.data = bytes(data)
        return True

    def save(self, settings: Settings) -> None:
        self.data = pack_settings(settings)
        if self.path is not None:
            self.path.write_bytes(self.data)


class DryBoxController:
    """Runs the drybox: one call to ``step`` is one pass of the control loop."""

    def __init__(
        self,
        box: DryBox | None = None,
        sensor: Sensor | None = None,
        screen: Screen | None = None,
        store: SettingsStore | None = None,
    ) -> None:
        self.box = box if box is not None else DryBox()
        if not self.box.menus:
            build_menus(self.box)
        self.sensor: Sensor = sensor if sensor is not None else StaticSensor()
        self.screen = screen if screen is not None else Screen()
        self.store = store if store is not None else SettingsStore()
        self.on_off_button = ButtonHandler(LONG_PRESS_MS)
        self.up_button = ButtonHandler(0)
        self.down_button = ButtonHandler(0)
        self.heater_output = False
        self.last_sensor_update = 0
        self.last_storage_update = 0

    def update_heater(self) -> bool:
        """Decide the heater output from the readings; return the output level."""
        box = self.box
        settings = box.settings
        output = False
        if box.heater_on and box.calibrated_humidity() > settings.target_humidity:
            temperature = box.calibrated_temperature()
            if temperature < settings.target_temp - HEATER_HYSTERESIS:
                output = True
                box.heater_running = True
            elif temperature > settings.target_temp + HEATER_HYSTERESIS:
                box.heater_running = False
        else:
            box.heater_running = False
        self.heater_output = output
        return output

    def sensor_update(self, now: int) -> bool:
        """Read the sensor at most every five seconds; return True if it was read."""
        if now - self.last_sensor_update < SENSOR_INTERVAL_MS:
            return False
        self.box.temperature = self.sensor.temperature()
        self.box.humidity = self.sensor.humidity() * 100
        self.update_heater()
        self.last_sensor_update = now
        return True

    def setup(self, now: int) -> None:
        self.store.load(self.box.settings)
        self.sensor_update(now)

    def maybe_update_storage(self, now: int) -> bool:
        """Save the settings at most once a minute; return True if saved."""
        if now - self.last_storage_update < STORAGE_INTERVAL_MS:
            return False
        self.store.save(self.box.settings)
        self.last_storage_update = now
        return True

    def dispatch_buttons(
        self, on_off: ButtonPress, up: ButtonPress, down: ButtonPress
    ) -> None:
        """Send at most one button event to the active menu, on/off first."""
        menu = self.box.menu
        if on_off is ButtonPress.SHORT_PRESS:
            menu.on_off_short_press()
        elif on_off is ButtonPress.LONG_PRESS:
            menu.on_off_long_press()
        elif up is ButtonPress.SHORT_PRESS:
            menu.up_press()
        elif down is ButtonPress.SHORT_PRESS:
            menu.down_press()

    def step(
        self, now: int, on_off_pressed: bool, up_pressed: bool, down_pressed: bool
    ) -> tuple[ButtonPress, ButtonPress, ButtonPress]:
        """Run one loop pass with the given button levels; return the presses seen."""
        presses = (
            self.on_off_button.update(on_off_pressed, now),
            self.up_button.update(up_pressed, now),
            self.down_button.update(down_pressed, now),
        )
        self.sensor_update(now)
        self.dispatch_buttons(*presses)
        self.box.menu.render(self.screen)
        self.maybe_update_storage(now)
        return presses


def main(argv: list[str] | None = None) -> int:
    """Simulate the drybox, one 100 ms tick per line of standard input.

    Each line lists the buttons held during that tick: 'o' (on/off), 'u' (up)
    and 'd' (down). The screen text is printed whenever it changes.
    """
    parser = argparse.ArgumentParser(prog="drybox", description=main.__doc__)
    parser.add_argument("--temperature", type=float, default=25.0, help="sensor reading in C")
    parser.add_argument("--humidity", type=float, default=50.0, help="sensor reading in %%")
    parser.add_argument("--settings", type=Path, default=None, help="settings storage file")
    args = parser.parse_args(argv)

    controller = DryBoxController(
        sensor=StaticSensor(args.temperature, args.humidity / 100),
        store=SettingsStore(args.settings),
    )
    now = 0
    try:
        controller.setup(now)
    except ValueError as exc:
        parser.error(str(exc))

    shown: str | None = None
    for line in sys.stdin:
        now += TICK_MS
        held = set(line.strip().lower())
        controller.step(now, "o" in held, "u" in held, "d" in held)
        text = controller.screen.last_text
        if text != shown:
            heater = "heater running" if controller.heater_output else "heater idle"
            print(text)
            print(f"-- {heater} --")
            shown = text
    return 0


if __name__ == "__main__":
    sys.exit(main())