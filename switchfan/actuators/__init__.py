# actuators/__init__.py
from .hs1xx_plug import Actuator, Hs1xxPlug, SystemInfo, encrypt, decrypt

__all__ = ['Actuator', 'Hs1xxPlug', 'SystemInfo', 'encrypt', 'decrypt']
