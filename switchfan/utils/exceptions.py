# utils/exceptions.py
"""
Exception hierarchy for the fan controller.

Adapters only raise; the control loop decides which failures it can live with.
"""


class SwitchFanException(Exception):
    """Base class for all controller errors"""
    pass


class ConfigurationException(SwitchFanException):
    """Raised when a required setting is missing or malformed"""
    pass


class SensorException(SwitchFanException):
    """Raised when the switch temperature cannot be read over SNMP"""
    pass


class ActuatorException(SwitchFanException):
    """Raised when the smart plug cannot be reached or rejects a command"""
    pass


class ActuatorProtocolException(SwitchFanException):
    """Raised when the smart plug answers with something that is not a sysinfo document"""
    pass
