"""Menus driven by the three front-panel buttons."""

from __future__ import annotations

from drybox.screen import FREE_MONO_9PT, Screen, format_humidity, format_temperature, prepare_screen
from drybox.state import DeviceState, DryBox, TemperatureUnit

MAX_TARGET_TEMP = 50
MIN_TARGET_TEMP = 0
MAX_TARGET_HUMIDITY = 80
MIN_TARGET_HUMIDITY = 0
CALIBRATION_STEP = 0.1

_FAHRENHEIT_STEP = 5.0 / 9.0


class MenuOption:
    """A screen that reacts to button presses; the defaults do nothing."""

    def __init__(self, box: DryBox) -> None:
        self.box = box

    def enter(self) -> None:
        """Reset the menu's own state when it becomes active."""

    def on_off_short_press(self) -> None:
        """Handle a short press of the on/off button."""

    def on_off_long_press(self) -> None:
        """Handle a long press of the on/off button."""

    def up_press(self) -> None:
        """Handle a press of the up button."""

    def down_press(self) -> None:
        """Handle a press of the down button."""

    def render(self, screen: Screen) -> None:
        """Draw the menu; the default leaves the screen untouched."""


class MainScreenMenu(MenuOption):
    """Shows readings; toggles the heater and nudges the target temperature."""

    def on_off_short_press(self) -> None:
        self.box.heater_on = not self.box.heater_on

    def on_off_long_press(self) -> None:
        self.box.go_to(DeviceState.MAIN_MENU)

    def up_press(self) -> None:
        settings = self.box.settings
        step = 1.0 if settings.unit is TemperatureUnit.CELSIUS else _FAHRENHEIT_STEP
        settings.target_temp = min(settings.target_temp + step, MAX_TARGET_TEMP)

    def down_press(self) -> None:
        settings = self.box.settings
        step = 0.5 if settings.unit is TemperatureUnit.CELSIUS else _FAHRENHEIT_STEP
        settings.target_temp = max(settings.target_temp - step, MIN_TARGET_TEMP)

    def render(self, screen: Screen) -> None:
        box = self.box
        settings = box.settings
        prepare_screen(screen, box)
        screen.set_text_size(2)
        temp = format_temperature(
            box.temperature, False, settings.temperature_calibration, settings.unit
        )
        hum = format_humidity(box.humidity)
        screen.set_cursor(0, 24)
        screen.print(temp)
        if box.heater_running:
            screen.print("^")
        screen.set_cursor(0, 48)
        screen.print(hum)
        screen.show()


class MainSettingsMenu(MenuOption):
    """Lists the settings screens; up and down cycle, short press opens one."""

    CHOICES: tuple[tuple[DeviceState, str], ...] = (
        (DeviceState.PICK_TEMPERATURE_DISPLAY, "1) Temp Unit"),
        (DeviceState.SET_TARGET_TEMP, "2) Target Temp"),
        (DeviceState.SET_TARGET_HUMIDITY, "3) Target Hum"),
        (DeviceState.SET_TEMPERATURE_CALIBRATION, "4) Temp Calib"),
        (DeviceState.SET_HUMIDITY_CALIBRATION, "5) Hum Calib"),
    )

    def __init__(self, box: DryBox) -> None:
        super().__init__(box)
        self.pick = 0

    def enter(self) -> None:
        self.pick = 0

    def on_off_short_press(self) -> None:
        state, _ = self.CHOICES[self.pick]
        self.box.go_to(state)

    def on_off_long_press(self) -> None:
        self.box.go_to(DeviceState.MAIN_SCREEN)

    def up_press(self) -> None:
        self.pick = (self.pick - 1) % len(self.CHOICES)

    def down_press(self) -> None:
        self.pick = (self.pick + 1) % len(self.CHOICES)

    def render(self, screen: Screen) -> None:
        prepare_screen(screen, self.box)
        screen.set_text_size(1)
        screen.set_font(FREE_MONO_9PT)
        screen.set_cursor(0, 32)
        screen.print("Menu")
        screen.set_font(None)
        screen.set_cursor(0, 48)
        screen.print(self.CHOICES[self.pick][1])
        screen.show()


def _other_unit(unit: TemperatureUnit) -> TemperatureUnit:
    if unit is TemperatureUnit.CELSIUS:
        return TemperatureUnit.FAHRENHEIT
    return TemperatureUnit.CELSIUS


class PickTemperatureDisplayMenu(MenuOption):
    """Chooses between Celsius and Fahrenheit display."""

    def __init__(self, box: DryBox) -> None:
        super().__init__(box)
        self.unit = box.settings.unit

    def enter(self) -> None:
        self.unit = self.box.settings.unit

    def on_off_short_press(self) -> None:
        self.box.settings.unit = self.unit
        self.box.go_to(DeviceState.MAIN_MENU)

    def up_press(self) -> None:
        self.unit = _other_unit(self.unit)

    def down_press(self) -> None:
        self.unit = _other_unit(self.unit)

    def render(self, screen: Screen) -> None:
        prepare_screen(screen, self.box)
        screen.set_cursor(0, 30)
        screen.print("Temp Unit: ")
        screen.print(f"{self.unit.value}\n")
        screen.show()


class SetTargetTempMenu(MenuOption):
    """Edits the target temperature, held in whole degrees while editing."""

    def __init__(self, box: DryBox) -> None:
        super().__init__(box)
        self.target_temp = 90

    def enter(self) -> None:
        self.target_temp = int(self.box.settings.target_temp)

    def on_off_short_press(self) -> None:
        self.box.settings.target_temp = float(self.target_temp)
        self.box.go_to(DeviceState.MAIN_MENU, enter=False)

    # The half-degree step is truncated back to whole degrees on storage.
    def up_press(self) -> None:
        self.target_temp = int(min(self.target_temp + 0.5, MAX_TARGET_TEMP))

    def down_press(self) -> None:
        self.target_temp = int(max(self.target_temp - 0.5, MIN_TARGET_TEMP))


class SetTargetHumidityMenu(MenuOption):
    """Edits the target relative humidity in whole percent."""

    def __init__(self, box: DryBox) -> None:
        super().__init__(box)
        self.target_humidity = 50

    def enter(self) -> None:
        self.target_humidity = self.box.settings.target_humidity

    def on_off_short_press(self) -> None:
        self.box.settings.target_humidity = self.target_humidity
        self.box.go_to(DeviceState.MAIN_MENU, enter=False)

    def up_press(self) -> None:
        self.target_humidity = min(self.target_humidity + 1, MAX_TARGET_HUMIDITY)

    def down_press(self) -> None:
        self.target_humidity = max(self.target_humidity - 1, MIN_TARGET_HUMIDITY)


class SetTemperatureCalibrationMenu(MenuOption):
    """Edits the temperature calibration offset."""

    def __init__(self, box: DryBox) -> None:
        super().__init__(box)
        self.temperature_calibration = 0.0

    def enter(self) -> None:
        self.temperature_calibration = self.box.settings.temperature_calibration

    def on_off_short_press(self) -> None:
        self.box.settings.temperature_calibration = self.temperature_calibration
        self.box.go_to(DeviceState.MAIN_MENU)

    def up_press(self) -> None:
        self.temperature_calibration += CALIBRATION_STEP

    def down_press(self) -> None:
        self.temperature_calibration -= CALIBRATION_STEP


class SetHumidityCalibrationMenu(MenuOption):
    """Edits the humidity calibration offset."""

    def __init__(self, box: DryBox) -> None:
        super().__init__(box)
        self.humidity_calibration = 0.0

    def enter(self) -> None:
        self.humidity_calibration = self.box.settings.humidity_calibration

    def on_off_short_press(self) -> None:
        self.box.settings.humidity_calibration = self.humidity_calibration
        self.box.go_to(DeviceState.MAIN_MENU)

    def up_press(self) -> None:
        self.humidity_calibration += CALIBRATION_STEP

    def down_press(self) -> None:
        self.humidity_calibration -= CALIBRATION_STEP


def build_menus(box: DryBox) -> dict[DeviceState, MenuOption]:
    """Create one menu per device state and register them on the box."""
    menus: dict[DeviceState, MenuOption] = {
        DeviceState.MAIN_SCREEN: MainScreenMenu(box),
        DeviceState.MAIN_MENU: MainSettingsMenu(box),
        DeviceState.PICK_TEMPERATURE_DISPLAY: PickTemperatureDisplayMenu(box),
        DeviceState.SET_TARGET_TEMP: SetTargetTempMenu(box),
        DeviceState.SET_TARGET_HUMIDITY: SetTargetHumidityMenu(box),
        DeviceState.SET_TEMPERATURE_CALIBRATION: SetTemperatureCalibrationMenu(box),
        DeviceState.SET_HUMIDITY_CALIBRATION: SetHumidityCalibrationMenu(box),
    }
    box.menus = menus
    return menus