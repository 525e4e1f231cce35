from enum import Enum


class MoistureStatus(str, Enum):
    DRY = "dry"
    WET = "wet"


class Urgency(str, Enum):
    NONE = "none"
    MEDIUM = "medium"
    HIGH = "high"


class WeatherCondition(str, Enum):
    SUNNY = "Sunny"
    HOT = "Hot"
    COOL = "Cool"
    HUMID = "Humid"


class BuzzerState(str, Enum):
    ON = "on"
    OFF = "off"


class BuzzerCommand(str, Enum):
    START = "start"
    STOP = "stop"
    TOGGLE = "toggle"


class ControlSource(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"
