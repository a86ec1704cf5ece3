# actuators/hs1xx_plug.py
"""
Client for TP-Link HS100/HS110 smart plugs.

The plugs speak the Kasa "smart home" protocol on TCP 9999: a JSON command,
XOR-obfuscated with an autokey cipher starting at 171, prefixed with its
length as a 4-byte big-endian integer. One request per connection.
"""

import asyncio
import json
import logging
import struct
from dataclasses import dataclass, fields
from typing import Any, Dict, Protocol, runtime_checkable

from switchfan.utils.exceptions import ActuatorException, ActuatorProtocolException

logger = logging.getLogger(__name__)

INITIAL_KEY = 171
DEFAULT_PORT = 9999
DEFAULT_TIMEOUT = 5.0  # seconds, per request

GET_SYSINFO = {"system": {"get_sysinfo": {}}}


def encrypt(payload: str) -> bytes:
    key = INITIAL_KEY
    data = payload.encode("utf-8")
    result = bytearray(struct.pack(">I", len(data)))
    for byte in data:
        key ^= byte
        result.append(key)
    return bytes(result)


def decrypt(payload: bytes) -> str:
    """Decrypt a message body (without the length prefix)"""
    key = INITIAL_KEY
    result = bytearray()
    for byte in payload:
        result.append(key ^ byte)
        key = byte
    return result.decode("utf-8", errors="replace")


@runtime_checkable
class Actuator(Protocol):
    async def on_time(self) -> int:
        ...

    async def turn_on(self) -> None:
        ...

    async def turn_off(self) -> None:
        ...


@dataclass
class SystemInfo:
    """The plug's get_sysinfo document"""
    err_code: int = 0
    sw_ver: str = ""
    hw_ver: str = ""
    type: str = ""
    model: str = ""
    mac: str = ""
    deviceId: str = ""
    hwId: str = ""
    fwId: str = ""
    oemId: str = ""
    alias: str = ""
    dev_name: str = ""
    icon_hash: str = ""
    relay_state: int = 0
    on_time: int = 0
    active_mode: str = ""
    feature: str = ""
    updating: int = 0
    rssi: int = 0
    led_off: int = 0
    latitude: float = 0.0
    longitude: float = 0.0

    @property
    def is_on(self) -> bool:
        return self.on_time != 0

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SystemInfo":
        try:
            sysinfo = payload["system"]["get_sysinfo"]
        except (KeyError, TypeError) as e:
            raise ActuatorProtocolException(f"Reply has no system.get_sysinfo document: {payload!r}") from e
        if not isinstance(sysinfo, dict):
            raise ActuatorProtocolException(f"system.get_sysinfo is not an object: {sysinfo!r}")

        known = {f.name: f for f in fields(cls)}
        values = {}
        for name, value in sysinfo.items():
            if name not in known:
                continue
            default = known[name].default
            try:
                values[name] = type(default)(value)
            except (TypeError, ValueError) as e:
                raise ActuatorProtocolException(f"sysinfo field {name} has unexpected value {value!r}") from e
        return cls(**values)


class Hs1xxPlug:
    """Switches a TP-Link HS1xx plug on and off and reads its uptime"""

    def __init__(self, host: str, port: int = DEFAULT_PORT, timeout: float = DEFAULT_TIMEOUT):
        self.host = host
        self.port = port
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "Hs1xxPlug":
        return cls(host=settings.HS1XX_SOCKET_IP, port=settings.HS1XX_SOCKET_PORT)

    async def _exchange(self, command: Dict[str, Any]) -> str:
        writer = None
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port), timeout=self.timeout
            )
            writer.write(encrypt(json.dumps(command)))
            await asyncio.wait_for(writer.drain(), timeout=self.timeout)
            header = await asyncio.wait_for(reader.readexactly(4), timeout=self.timeout)
            (length,) = struct.unpack(">I", header)
            body = await asyncio.wait_for(reader.readexactly(length), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ActuatorException(f"Plug {self.host}:{self.port} timed out") from e
        except (OSError, asyncio.IncompleteReadError) as e:
            raise ActuatorException(f"Plug {self.host}:{self.port} unreachable: {e}") from e
        finally:
            if writer is not None:
                writer.close()
                try:
                    await writer.wait_closed()
                except OSError:
                    pass
        return decrypt(body)

    async def send_command(self, command: Dict[str, Any]) -> Dict[str, Any]:
        raw = await self._exchange(command)
        try:
            reply = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ActuatorProtocolException(f"Plug {self.host} sent malformed JSON: {e}") from e
        if not isinstance(reply, dict):
            raise ActuatorProtocolException(f"Plug {self.host} sent unexpected reply: {raw!r}")
        logger.debug(f"Plug {self.host} replied {reply}")
        return reply

    async def system_info(self) -> SystemInfo:
        reply = await self.send_command(GET_SYSINFO)
        info = SystemInfo.from_payload(reply)
        if info.err_code != 0:
            raise ActuatorException(f"Plug {self.host} get_sysinfo failed with err_code {info.err_code}")
        return info

    async def on_time(self) -> int:
        info = await self.system_info()
        return info.on_time

    async def set_relay_state(self, on: bool) -> None:
        """Switch the relay; an unreadable reply counts as a failed command, not a fatal one"""
        try:
            reply = await self.send_command({"system": {"set_relay_state": {"state": 1 if on else 0}}})
        except ActuatorProtocolException as e:
            raise ActuatorException(f"Plug {self.host} set_relay_state reply unreadable: {e}") from e
        try:
            err_code = reply["system"]["set_relay_state"].get("err_code", 0)
        except (KeyError, TypeError, AttributeError) as e:
            raise ActuatorException(f"Plug {self.host} sent unexpected reply: {reply!r}") from e
        if err_code != 0:
            raise ActuatorException(f"Plug {self.host} set_relay_state failed with err_code {err_code}")
        logger.info(f"Plug {self.host} switched {'on' if on else 'off'}")

    async def turn_on(self) -> None:
        await self.set_relay_state(True)

    async def turn_off(self) -> None:
        await self.set_relay_state(False)
