# drybox

The control logic of a filament drybox heater as a plain Python package,
with no dependencies outside the standard library.

- `drybox.state` – the shared device state: `DryBox` (readings, heater flags,
  active screen), `Settings` (targets, calibration offsets, display unit) and
  the enums `DeviceState`, `TemperatureUnit` and `ButtonPress`.
- `drybox.screen` – `Screen`, an in-memory 128x64 monochrome display, the
  text formatters `format_temperature` and `format_humidity`, and the drawing
  routines `prepare_screen`, `draw_heater_on` and `draw_logo`.
- `drybox.menu` – the button-driven menus (`MainScreenMenu`,
  `MainSettingsMenu`, `PickTemperatureDisplayMenu`, `SetTargetTempMenu`,
  `SetTargetHumidityMenu`, `SetTemperatureCalibrationMenu`,
  `SetHumidityCalibrationMenu`) and `build_menus`, which registers one menu
  per `DeviceState` on a `DryBox`.
- `drybox.controller` – `ButtonHandler` (debouncing), `StaticSensor`,
  `SettingsStore` with `pack_settings` / `unpack_settings`, the
  `DryBoxController` control loop and the `drybox` command.

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## The `drybox` command

```
drybox [--temperature C] [--humidity PERCENT] [--settings FILE]
```

The command runs the controller against a fixed sensor reading (25 °C and
50 % by default). Each line read from standard input is one 100 ms tick and
lists the buttons held during it: `o` for on/off, `u` for up, `d` for down
(an empty line means no button is held). Whenever the screen text changes it
is printed, followed by `-- heater running --` or `-- heater idle --`.

With `--settings FILE` the settings are loaded from that file at start (if
it exists) and written to it once a minute of simulated time, the first time
on the first tick. A file that is too short or holds an unknown unit byte is
reported as an error.

For example, a short press of on/off switches the heater on; holding it for
more than ten ticks and then releasing opens the settings menu:

```
printf 'o\n\n' | drybox --temperature 30 --humidity 60
```

## Using it from Python

```python
from drybox.controller import DryBoxController, StaticSensor, SettingsStore
from drybox.screen import format_humidity, format_temperature
from drybox.state import TemperatureUnit

print(format_temperature(21.4, False, 0.0, TemperatureUnit.CELSIUS))  # 21.4C
print(format_humidity(45.0))                                           # 45.0%

controller = DryBoxController(
    sensor=StaticSensor(celsius=30.0, fraction=0.6),
    store=SettingsStore("settings.bin"),
)
controller.setup(0)
controller.step(100, True, False, False)    # on/off held
controller.step(200, False, False, False)   # released: short press
print(controller.box.heater_on)             # True
print(controller.screen.last_text)
```

`step(now, on_off_pressed, up_pressed, down_pressed)` is one pass of the
control loop, with `now` in milliseconds. It debounces the buttons, reads the
sensor if due, sends at most one button event to the active menu (on/off
first, then up, then down), renders the menu into the `Screen` and saves the
settings if due. It returns the three `ButtonPress` values it saw.

A sensor is any object with `temperature()` (Celsius) and `humidity()`
(a fraction, multiplied by 100 on reading) methods.

## Behaviour

- **Heater.** `update_heater` gives a heater output only when the heater is
  switched on, the calibrated humidity is above the target humidity and the
  calibrated temperature is more than 1.5 °C below the target. Above
  target + 1.5 °C `heater_running` is cleared; between the two limits the
  output is off but `heater_running` keeps its previous value.
- **Timing.** The sensor is read at most every 5 seconds and the settings are
  saved at most every 60 seconds, both counted from time 0.
- **Buttons.** Presses are reported when the button is released. On the
  on/off button a release within one second of the press is a short press
  and a release later than one second is a long press; a release at exactly
  one second reports nothing. Every release of up or down is a short press.
- **Main screen.** A short on/off press toggles the heater; a long press
  opens the settings menu. Up raises the target temperature by 1 °C (or 5/9 °C
  when showing Fahrenheit) up to 50 °C; down lowers it by 0.5 °C (or 5/9 °C)
  down to 0 °C. The screen shows the targets, a heater indicator, the
  calibrated temperature (with `^` while the heater is running) and the
  humidity.
- **Settings menu.** Up and down cycle through the five entries, a short
  press opens one and a long press returns to the main screen. In the
  editors a short press stores the value and goes back to the settings menu:
  - temperature unit: up or down toggles Celsius/Fahrenheit;
  - target temperature: edited in whole degrees, 0–50;
  - target humidity: whole percent, 0–80;
  - temperature and humidity calibration: steps of 0.1, no limits.
- **Display.** Temperatures are stored in Celsius; the displayed value adds
  the calibration, is capped at 70 °C and converted to Fahrenheit if chosen.
- **Storage.** `pack_settings` writes a 17-byte little-endian record: target
  temperature (float32) at 0, target humidity (uint16) at 4, temperature
  calibration (float32) at 8, humidity calibration (float32) at 12 and the
  unit character (`C` or `F`) at 16. `SettingsStore` keeps the record in
  memory and, if given a path, in that file.

## What it does not do

The package talks to no hardware. There is no driver for a real temperature
and humidity sensor (only `StaticSensor`), no heater pin (the output is the
`heater_output` flag) and no physical display: `Screen` keeps lit pixels and
printed text in memory, and text is recorded as strings rather than drawn as
glyphs into the pixel buffer.