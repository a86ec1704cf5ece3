# sensors/snmp_temperature.py
"""
Reads the switch temperature with a single SNMPv3 GET.

The session is authenticated (SHA) and encrypted (AES-128) with the same passphrase,
which is how UniFi switches expose their SNMPv3 user.
"""

import logging
from typing import Protocol, runtime_checkable

from pyasn1.error import PyAsn1Error
from pyasn1.type import univ
from pysnmp.error import PySnmpError
from pysnmp.hlapi.v3arch.asyncio import (
    ContextData,
    ObjectIdentity,
    ObjectType,
    SnmpEngine,
    UdpTransportTarget,
    UsmUserData,
    get_cmd,
    usmAesCfb128Protocol,
    usmHMACSHAAuthProtocol,
)
from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

from switchfan.utils.exceptions import SensorException

logger = logging.getLogger(__name__)

SNMP_TIMEOUT = 30  # seconds, connect + read
SNMP_RETRIES = 0


@runtime_checkable
class TemperatureSensor(Protocol):
    async def read_temperature(self) -> int:
        ...


class SnmpTemperatureSensor:
    """Fetches one integer value by OID from the switch"""

    def __init__(self, host: str, username: str, password: str, oid: str,
                 port: int = 161, timeout: int = SNMP_TIMEOUT):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.oid = oid
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "SnmpTemperatureSensor":
        return cls(
            host=settings.SWITCH_IP,
            username=settings.SNMP_USERNAME,
            password=settings.SNMP_PASSWORD,
            oid=settings.TEMPERATURE_OID,
            port=settings.SNMP_PORT,
        )

    def _user_data(self) -> UsmUserData:
        return UsmUserData(
            self.username,
            authKey=self.password,
            privKey=self.password,
            authProtocol=usmHMACSHAAuthProtocol,
            privProtocol=usmAesCfb128Protocol,
        )

    async def read_temperature(self) -> int:
        snmp_engine = SnmpEngine()
        try:
            try:
                transport = await UdpTransportTarget.create(
                    (self.host, self.port), timeout=self.timeout, retries=SNMP_RETRIES
                )
                error_indication, error_status, error_index, var_binds = await get_cmd(
                    snmp_engine,
                    self._user_data(),
                    transport,
                    ContextData(),
                    ObjectType(ObjectIdentity(self.oid)),
                )
            except (PySnmpError, OSError) as e:
                raise SensorException(f"SNMP session to {self.host}:{self.port} failed: {e}") from e
        finally:
            snmp_engine.close_dispatcher()

        if error_indication:
            raise SensorException(f"SNMP GET {self.oid} on {self.host} failed: {error_indication}")
        if error_status:
            raise SensorException(
                f"SNMP GET {self.oid} on {self.host} returned {error_status.prettyPrint()} at index {error_index}"
            )
        if not var_binds:
            raise SensorException(f"SNMP GET {self.oid} on {self.host} returned no variables")

        value = var_binds[0][1]
        temperature = self._to_int(value)
        logger.debug(f"SNMP {self.host} {self.oid} = {temperature}")
        return temperature

    def _to_int(self, value) -> int:
        if isinstance(value, (NoSuchObject, NoSuchInstance, EndOfMibView)):
            raise SensorException(f"OID {self.oid} does not exist on {self.host}")
        if not isinstance(value, univ.Integer):
            raise SensorException(f"OID {self.oid} on {self.host} is not an integer: {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError, PyAsn1Error) as e:
            raise SensorException(f"OID {self.oid} on {self.host} has no usable value: {e}") from e
