# sensors/__init__.py
from .snmp_temperature import SnmpTemperatureSensor, TemperatureSensor

__all__ = ['SnmpTemperatureSensor', 'TemperatureSensor']
