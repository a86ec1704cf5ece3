# tests/helpers.py
import asyncio
import json
import struct

from switchfan.actuators.hs1xx_plug import decrypt, encrypt
from switchfan.config.settings import Settings


def make_settings(**overrides) -> Settings:
    values = {
        "SWITCH_IP": "192.0.2.10",
        "HS1XX_SOCKET_IP": "192.0.2.20",
        "SNMP_USERNAME": "monitor",
        "SNMP_PASSWORD": "secret-passphrase",
        "TEMPERATURE_OID": "1.3.6.1.4.1.4413.1.1.43.1.8.1.5.1.1",
        "MAXIMUM_OFF_TEMPERATURE": 30,
        "MINIMAL_ON_TEMPERATURE": 20,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def sysinfo_reply(on_time=0, relay_state=0, err_code=0):
    return {
        "system": {
            "get_sysinfo": {
                "err_code": err_code,
                "sw_ver": "1.2.5 Build 171213 Rel.101523",
                "hw_ver": "1.0",
                "type": "IOT.SMARTPLUGSWITCH",
                "model": "HS100(UK)",
                "mac": "50:C7:BF:00:00:01",
                "deviceId": "8006",
                "alias": "switch fan",
                "dev_name": "Wi-Fi Smart Plug",
                "relay_state": relay_state,
                "on_time": on_time,
                "active_mode": "none",
                "feature": "TIM",
                "updating": 0,
                "rssi": -52,
                "led_off": 0,
                "latitude": 51.5,
                "longitude": -0.12,
                "next_action": {"type": -1},
            }
        }
    }


class FakePlug:
    """Minimal TCP server speaking the smart home protocol.

    Answers with queued ``replies`` first, then with ``reply`` for every request.
    """

    def __init__(self):
        self.received = []
        self.replies = []
        self.reply = sysinfo_reply()
        self.silent = False
        self.server = None
        self.port = None

    async def start(self):
        self.server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self.server.sockets[0].getsockname()[1]

    async def stop(self):
        self.server.close()
        await self.server.wait_closed()

    async def _handle(self, reader, writer):
        try:
            if self.silent:
                await reader.read()
                return
            header = await reader.readexactly(4)
            (length,) = struct.unpack(">I", header)
            body = await reader.readexactly(length)
            self.received.append(json.loads(decrypt(body)))
            reply = self.replies.pop(0) if self.replies else self.reply
            if not isinstance(reply, str):
                reply = json.dumps(reply)
            writer.write(encrypt(reply))
            await writer.drain()
        finally:
            writer.close()
