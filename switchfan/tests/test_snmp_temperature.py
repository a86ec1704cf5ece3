import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from pysnmp.error import PySnmpError
from pysnmp.proto.rfc1902 import Integer32, OctetString
from pysnmp.proto.rfc1905 import NoSuchInstance

from switchfan.sensors.snmp_temperature import (
    SNMP_TIMEOUT,
    SnmpTemperatureSensor,
    TemperatureSensor,
    usmAesCfb128Protocol,
    usmHMACSHAAuthProtocol,
)
from switchfan.utils.exceptions import SensorException

from .helpers import make_settings

OID = "1.3.6.1.4.1.4413.1.1.43.1.8.1.5.1.1"
MODULE = "switchfan.sensors.snmp_temperature"


class TestSnmpTemperatureSensor(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.sensor = SnmpTemperatureSensor("192.0.2.10", "monitor", "secret-passphrase", OID)

        patchers = {
            "engine": patch(f"{MODULE}.SnmpEngine"),
            "transport": patch(f"{MODULE}.UdpTransportTarget"),
            "user": patch(f"{MODULE}.UsmUserData"),
            "get_cmd": patch(f"{MODULE}.get_cmd", new_callable=AsyncMock),
            "identity": patch(f"{MODULE}.ObjectIdentity"),
            "object_type": patch(f"{MODULE}.ObjectType"),
        }
        self.mocks = {name: patcher.start() for name, patcher in patchers.items()}
        for patcher in patchers.values():
            self.addCleanup(patcher.stop)

        self.transport = MagicMock()
        self.mocks["transport"].create = AsyncMock(return_value=self.transport)

    def reply(self, value, error_indication=None, error_status=0, error_index=0):
        self.mocks["get_cmd"].return_value = (error_indication, error_status, error_index, [(OID, value)])

    async def test_reads_integer_value(self):
        self.reply(Integer32(47))

        temperature = await self.sensor.read_temperature()

        self.assertEqual(temperature, 47)
        self.assertIsInstance(temperature, int)

    async def test_uses_authpriv_with_one_passphrase(self):
        self.reply(Integer32(47))

        await self.sensor.read_temperature()

        user_kwargs = self.mocks["user"].call_args.kwargs
        self.assertEqual(self.mocks["user"].call_args.args, ("monitor",))
        self.assertEqual(user_kwargs["authKey"], "secret-passphrase")
        self.assertEqual(user_kwargs["privKey"], "secret-passphrase")
        self.assertIs(user_kwargs["authProtocol"], usmHMACSHAAuthProtocol)
        self.assertIs(user_kwargs["privProtocol"], usmAesCfb128Protocol)
        self.mocks["identity"].assert_called_once_with(OID)
        self.mocks["object_type"].assert_called_once_with(self.mocks["identity"].return_value)
        self.assertIs(self.mocks["get_cmd"].call_args.args[4], self.mocks["object_type"].return_value)
        self.mocks["transport"].create.assert_awaited_once_with(
            ("192.0.2.10", 161), timeout=SNMP_TIMEOUT, retries=0
        )
        self.assertEqual(SNMP_TIMEOUT, 30)

    async def test_engine_is_closed(self):
        self.reply(Integer32(47))

        await self.sensor.read_temperature()

        self.mocks["engine"].return_value.close_dispatcher.assert_called_once()

    async def test_error_indication_raises(self):
        self.reply(None, error_indication="No SNMP response received before timeout")

        with self.assertRaises(SensorException) as ctx:
            await self.sensor.read_temperature()
        self.assertIn("timeout", str(ctx.exception))

    async def test_error_status_raises(self):
        self.reply(None, error_status=Integer32(5), error_index=1)

        with self.assertRaises(SensorException):
            await self.sensor.read_temperature()

    async def test_missing_oid_raises(self):
        self.reply(NoSuchInstance(""))

        with self.assertRaises(SensorException) as ctx:
            await self.sensor.read_temperature()
        self.assertIn("does not exist", str(ctx.exception))

    async def test_non_integer_value_raises(self):
        self.reply(OctetString("hot"))

        with self.assertRaises(SensorException):
            await self.sensor.read_temperature()

    async def test_empty_response_raises(self):
        self.mocks["get_cmd"].return_value = (None, 0, 0, [])

        with self.assertRaises(SensorException):
            await self.sensor.read_temperature()

    async def test_transport_failure_raises_and_closes_engine(self):
        self.mocks["transport"].create.side_effect = PySnmpError("Bad IPv4/UDP transport address")

        with self.assertRaises(SensorException):
            await self.sensor.read_temperature()

        self.mocks["get_cmd"].assert_not_awaited()
        self.mocks["engine"].return_value.close_dispatcher.assert_called_once()


class TestSensorFromSettings(unittest.TestCase):

    def test_from_settings(self):
        sensor = SnmpTemperatureSensor.from_settings(make_settings(SNMP_PORT=1161))

        self.assertIsInstance(sensor, TemperatureSensor)
        self.assertEqual(sensor.host, "192.0.2.10")
        self.assertEqual(sensor.port, 1161)
        self.assertEqual(sensor.username, "monitor")
        self.assertEqual(sensor.oid, OID)
        self.assertEqual(sensor.timeout, 30)


if __name__ == "__main__":
    unittest.main()
