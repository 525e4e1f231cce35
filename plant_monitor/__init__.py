"""Soil-moisture dashboard: device polling, buzzer control and plant-care advice."""

__version__ = "0.1.0"
