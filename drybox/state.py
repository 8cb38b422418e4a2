"""Shared device state: settings, readings and the active screen."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class DeviceState(Enum):
    """Which screen or menu the device is showing."""

    MAIN_SCREEN = auto()
    MAIN_MENU = auto()
    PICK_TEMPERATURE_DISPLAY = auto()
    SET_TARGET_TEMP = auto()
    SET_TARGET_HUMIDITY = auto()
    SET_TEMPERATURE_CALIBRATION = auto()
    SET_HUMIDITY_CALIBRATION = auto()


class TemperatureUnit(str, Enum):
    """Unit used to display temperatures; the value is the suffix shown."""

    FAHRENHEIT = "F"
    CELSIUS = "C"


class ButtonPress(Enum):
    """Result of debouncing a button for one loop iteration."""

    NONE = auto()
    SHORT_PRESS = auto()
    LONG_PRESS = auto()


@dataclass
class Settings:
    """User settings that persist across restarts.

    Temperatures are always stored in Celsius.
    """

    target_temp: float = 45.0
    target_humidity: int = 30
    temperature_calibration: float = 0.0
    humidity_calibration: float = 0.0
    unit: TemperatureUnit = TemperatureUnit.CELSIUS


@dataclass
class DryBox:
    """Live state of the drybox: readings, heater flags and active menu."""

    settings: Settings = field(default_factory=Settings)
    temperature: float = 255.0
    humidity: float = 99.0
    heater_on: bool = False
    heater_running: bool = False
    state: DeviceState = DeviceState.MAIN_SCREEN
    menus: dict[DeviceState, Any] = field(default_factory=dict)

    @property
    def menu(self) -> Any:
        """The menu registered for the current state."""
        try:
            return self.menus[self.state]
        except KeyError:
            raise KeyError(f"no menu registered for {self.state.name}") from None

    def go_to(self, state: DeviceState, enter: bool = True) -> None:
        """Switch to another state, optionally resetting its menu."""
        self.state = state
        if enter:
            self.menu.enter()

    def calibrated_temperature(self) -> float:
        """Measured temperature with the calibration offset applied."""
        return self.temperature + self.settings.temperature_calibration

    def calibrated_humidity(self) -> float:
        """Measured humidity with the calibration offset applied."""
        return self.humidity + self.settings.humidity_calibration