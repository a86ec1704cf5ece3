# utils/__init__.py
from .exceptions import (
    SwitchFanException,
    ConfigurationException,
    SensorException,
    ActuatorException,
    ActuatorProtocolException,
)
from .logger import setup_logging

__all__ = [
    'SwitchFanException',
    'ConfigurationException',
    'SensorException',
    'ActuatorException',
    'ActuatorProtocolException',
    'setup_logging',
]
