"""Controller logic for a filament drybox heater: state, screen, menus and control loop."""

__version__ = "0.1.0"
__all__ = ["state", "screen", "menu", "controller"]