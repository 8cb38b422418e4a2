import io
import struct

import pytest

from drybox.controller import (
    SETTINGS_SIZE,
    ButtonHandler,
    DryBoxController,
    SettingsStore,
    StaticSensor,
    main,
    pack_settings,
    unpack_settings,
)
from drybox.state import ButtonPress, DeviceState, DryBox, Settings, TemperatureUnit


def make_controller(temperature=25.0, fraction=0.5, store=None):
    return DryBoxController(sensor=StaticSensor(temperature, fraction), store=store)


# --- ButtonHandler ---------------------------------------------------------


def test_zero_delay_button_reports_short_press_on_release():
    handler = ButtonHandler(0)
    assert handler.update(True, 100) is ButtonPress.NONE
    assert handler.update(True, 5000) is ButtonPress.NONE
    assert handler.update(False, 5100) is ButtonPress.SHORT_PRESS
    assert handler.update(False, 5200) is ButtonPress.NONE


def test_idle_button_reports_nothing():
    handler = ButtonHandler()
    assert handler.update(False, 0) is ButtonPress.NONE
    assert handler.was_pressed is False


def test_quick_release_is_short_press():
    handler = ButtonHandler(1000)
    handler.update(True, 100)
    handler.update(True, 300)
    assert handler.first_press == 100
    assert handler.update(False, 500) is ButtonPress.SHORT_PRESS
    assert handler.first_press is None


def test_held_release_is_long_press():
    handler = ButtonHandler(1000)
    handler.update(True, 100)
    assert handler.update(False, 1500) is ButtonPress.LONG_PRESS
    assert handler.first_press is None


def test_release_exactly_at_threshold_reports_nothing_and_keeps_start():
    handler = ButtonHandler(1000)
    handler.update(True, 100)
    assert handler.update(False, 1100) is ButtonPress.NONE
    assert handler.first_press == 100
    # The stale start time makes the next quick press count as long.
    handler.update(True, 2000)
    assert handler.update(False, 2100) is ButtonPress.LONG_PRESS


# --- StaticSensor ----------------------------------------------------------


def test_static_sensor_returns_its_readings():
    sensor = StaticSensor(31.5, 0.42)
    assert sensor.temperature() == 31.5
    assert sensor.humidity() == 0.42


# --- settings persistence --------------------------------------------------


def test_pack_settings_layout():
    settings = Settings(
        target_temp=45.0,
        target_humidity=30,
        temperature_calibration=0.5,
        humidity_calibration=-2.0,
        unit=TemperatureUnit.FAHRENHEIT,
    )
    data = pack_settings(settings)
    assert len(data) == SETTINGS_SIZE == 17
    assert struct.unpack_from("<f", data, 0)[0] == 45.0
    assert struct.unpack_from("<H", data, 4)[0] == 30
    assert struct.unpack_from("<f", data, 8)[0] == 0.5
    assert struct.unpack_from("<f", data, 12)[0] == -2.0
    assert data[16:17] == b"F"


def test_pack_unpack_round_trip():
    original = Settings(40.5, 55, 1.25, -0.75, TemperatureUnit.FAHRENHEIT)
    restored = unpack_settings(pack_settings(original), Settings())
    assert restored == original


def test_unpack_short_data_raises():
    with pytest.raises(ValueError):
        unpack_settings(b"\x00" * 10, Settings())


def test_unpack_bad_unit_raises():
    data = bytearray(pack_settings(Settings()))
    data[16] = 0xFF
    with pytest.raises(ValueError):
        unpack_settings(bytes(data), Settings())


def test_store_load_without_data_leaves_settings():
    store = SettingsStore()
    settings = Settings()
    assert store.load(settings) is False
    assert settings == Settings()


def test_store_file_round_trip(tmp_path):
    path = tmp_path / "settings.bin"
    saved = Settings(38.0, 44, 0.5, 1.5, TemperatureUnit.FAHRENHEIT)
    SettingsStore(path).save(saved)
    assert path.read_bytes() == pack_settings(saved)
    loaded = Settings()
    assert SettingsStore(path).load(loaded) is True
    assert loaded == saved


# --- heater control --------------------------------------------------------


def test_heater_off_never_runs():
    controller = make_controller()
    box = controller.box
    box.temperature, box.humidity = 10.0, 90.0
    assert controller.update_heater() is False
    assert box.heater_running is False


def test_heater_runs_when_humid_and_cold():
    controller = make_controller()
    box = controller.box
    box.heater_on = True
    box.temperature, box.humidity = 20.0, 90.0
    assert controller.update_heater() is True
    assert box.heater_running is True
    assert controller.heater_output is True


def test_heater_stops_when_too_hot():
    controller = make_controller()
    box = controller.box
    box.heater_on = True
    box.heater_running = True
    box.temperature, box.humidity = box.settings.target_temp + 2, 90.0
    assert controller.update_heater() is False
    assert box.heater_running is False


def test_heater_in_band_keeps_running_flag_but_drives_low():
    controller = make_controller()
    box = controller.box
    box.heater_on = True
    box.heater_running = True
    box.temperature, box.humidity = box.settings.target_temp, 90.0
    assert controller.update_heater() is False
    assert box.heater_running is True


def test_heater_stops_when_dry_enough():
    controller = make_controller()
    box = controller.box
    box.heater_on = True
    box.heater_running = True
    box.temperature = 10.0
    box.humidity = float(box.settings.target_humidity)
    assert controller.update_heater() is False
    assert box.heater_running is False


def test_heater_uses_calibration():
    controller = make_controller()
    box = controller.box
    box.heater_on = True
    box.temperature, box.humidity = 20.0, float(box.settings.target_humidity)
    box.settings.humidity_calibration = 1.0
    assert controller.update_heater() is True
    box.settings.temperature_calibration = box.settings.target_temp
    assert controller.update_heater() is False
    assert box.heater_running is False


# --- sensor polling and storage timing -------------------------------------


def test_sensor_update_waits_for_interval():
    controller = make_controller(temperature=22.0, fraction=0.4)
    box = controller.box
    assert controller.sensor_update(4999) is False
    assert box.temperature == DryBox().temperature
    assert controller.sensor_update(5000) is True
    assert box.temperature == 22.0
    assert box.humidity == pytest.approx(0.4 * 100)
    assert controller.sensor_update(9999) is False
    assert controller.sensor_update(10000) is True


def test_setup_loads_stored_settings():
    store = SettingsStore()
    stored = Settings(35.0, 20, 0.0, 0.0, TemperatureUnit.FAHRENHEIT)
    store.save(stored)
    controller = make_controller(store=store)
    controller.setup(0)
    assert controller.box.settings == stored


def test_storage_saved_at_most_once_a_minute():
    controller = make_controller()
    assert controller.maybe_update_storage(59999) is False
    assert controller.store.data is None
    assert controller.maybe_update_storage(60000) is True
    assert controller.store.data == pack_settings(controller.box.settings)
    assert controller.maybe_update_storage(60001) is False


# --- button dispatch and loop ----------------------------------------------


def test_dispatch_prefers_on_off_over_up():
    controller = make_controller()
    before = controller.box.settings.target_temp
    controller.dispatch_buttons(
        ButtonPress.SHORT_PRESS, ButtonPress.SHORT_PRESS, ButtonPress.NONE
    )
    assert controller.box.heater_on is True
    assert controller.box.settings.target_temp == before


def test_dispatch_long_press_opens_menu():
    controller = make_controller()
    controller.dispatch_buttons(ButtonPress.LONG_PRESS, ButtonPress.NONE, ButtonPress.NONE)
    assert controller.box.state is DeviceState.MAIN_MENU


def test_step_up_press_raises_target_and_renders():
    controller = make_controller()
    start = controller.box.settings.target_temp
    controller.step(100, False, True, False)
    presses = controller.step(200, False, False, False)
    assert presses == (ButtonPress.NONE, ButtonPress.SHORT_PRESS, ButtonPress.NONE)
    assert controller.box.settings.target_temp == min(start + 1.0, 50)
    assert controller.screen.frame_count == 2


def test_step_long_hold_enters_menu():
    controller = make_controller()
    now = 0
    for _ in range(12):
        now += 100
        controller.step(now, True, False, False)
    now += 100
    presses = controller.step(now, False, False, False)
    assert presses[0] is ButtonPress.LONG_PRESS
    assert controller.box.state is DeviceState.MAIN_MENU
    assert "Menu" in controller.screen.last_text


# --- command ---------------------------------------------------------------


def test_main_shows_header_and_menu(monkeypatch, capsys):
    lines = "\n" + "o\n" * 12 + "\n"
    monkeypatch.setattr("sys.stdin", io.StringIO(lines))
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "45.0C" in out
    assert "1) Temp Unit" in out


def test_main_rejects_corrupt_settings(tmp_path):
    path = tmp_path / "bad.bin"
    path.write_bytes(b"\x01\x02")
    with pytest.raises(SystemExit):
        main(["--settings", str(path)])