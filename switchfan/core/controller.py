# core/controller.py
"""
Hysteresis control loop for the switch fan.

Every cycle re-reads the configuration, polls the switch temperature and the plug's
on-time, then switches the plug only when the temperature crosses a threshold.
Between the thresholds the plug is left exactly as it is.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from switchfan.actuators.hs1xx_plug import Actuator, Hs1xxPlug
from switchfan.config.settings import Settings, load_settings
from switchfan.monitoring.metrics import MetricsSink
from switchfan.sensors.snmp_temperature import SnmpTemperatureSensor, TemperatureSensor
from switchfan.utils.exceptions import ActuatorException

logger = logging.getLogger(__name__)

# On-time assumed when the plug cannot be queried. Zero reads as "off", so a hot
# switch triggers an ON command even if the fan is already running.
FALLBACK_ON_TIME = 0


class Action(Enum):
    START_COOLING = "temperature too hot at {t}, will start cooling"
    KEEP_COOLING = "temperature too hot at {t} but on, will keep cooling"
    STOP_COOLING = "temperature cool enough at {t} and on, will turn it off"
    KEEP_OFF = "temperature cool enough at {t} and off, will keep off"
    HOLD_ON = "temperature ok at {t}, will keep it running"
    HOLD_OFF = "temperature ok at {t}, will keep off"


@dataclass(frozen=True)
class Decision:
    temperature: int
    on_time: int
    action: Action
    relay_on: bool
    command: Optional[bool] = None  # True = switch on, False = switch off, None = leave alone

    def describe(self) -> str:
        return self.action.value.format(t=self.temperature)


def decide(temperature: int, on_time: int, too_hot: int, cool_enough: int) -> Decision:
    """Pick the plug state for one reading.

    The upper threshold is checked first, so a reading equal to ``too_hot`` always
    cools, even when the thresholds are inverted.
    """
    currently_on = on_time != 0

    if temperature >= too_hot:
        if currently_on:
            return Decision(temperature, on_time, Action.KEEP_COOLING, relay_on=True)
        return Decision(temperature, on_time, Action.START_COOLING, relay_on=True, command=True)

    if temperature <= cool_enough:
        if currently_on:
            return Decision(temperature, on_time, Action.STOP_COOLING, relay_on=False, command=False)
        return Decision(temperature, on_time, Action.KEEP_OFF, relay_on=False)

    if currently_on:
        return Decision(temperature, on_time, Action.HOLD_ON, relay_on=True)
    return Decision(temperature, on_time, Action.HOLD_OFF, relay_on=False)


class FanController:
    """Runs the decision cycle forever on the event loop.

    Configuration and sensor failures propagate and stop the loop. Plug failures
    are logged and the loop carries on with the next cycle.
    """

    def __init__(self,
                 metrics: MetricsSink,
                 settings_loader: Callable[[], Settings] = load_settings,
                 sensor_factory: Callable[[Settings], TemperatureSensor] = SnmpTemperatureSensor.from_settings,
                 actuator_factory: Callable[[Settings], Actuator] = Hs1xxPlug.from_settings,
                 sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self.metrics = metrics
        self.settings_loader = settings_loader
        self.sensor_factory = sensor_factory
        self.actuator_factory = actuator_factory
        self.sleep = sleep
        self.settings: Optional[Settings] = None
        self.cycles = 0

    async def _read_on_time(self, actuator: Actuator) -> int:
        try:
            return await actuator.on_time()
        except ActuatorException as e:
            logger.error(f"Failed to read plug state: {e}")
            logger.warning(f"Assuming plug on-time {FALLBACK_ON_TIME} for this cycle")
            return FALLBACK_ON_TIME

    async def _send_command(self, actuator: Actuator, on: bool) -> bool:
        try:
            if on:
                await actuator.turn_on()
            else:
                await actuator.turn_off()
            return True
        except ActuatorException as e:
            logger.error(f"Failed to switch plug {'on' if on else 'off'}: {e}")
            return False

    async def run_cycle(self) -> Decision:
        settings = self.settings_loader()
        self.settings = settings
        if settings.thresholds_inverted:
            logger.warning(
                f"MAXIMUM_OFF_TEMPERATURE ({settings.MAXIMUM_OFF_TEMPERATURE}) is below "
                f"MINIMAL_ON_TEMPERATURE ({settings.MINIMAL_ON_TEMPERATURE}); the upper threshold wins"
            )

        sensor = self.sensor_factory(settings)
        actuator = self.actuator_factory(settings)

        temperature = await sensor.read_temperature()
        self.metrics.set_temperature(temperature)

        on_time = await self._read_on_time(actuator)

        decision = decide(
            temperature,
            on_time,
            too_hot=settings.MAXIMUM_OFF_TEMPERATURE,
            cool_enough=settings.MINIMAL_ON_TEMPERATURE,
        )
        logger.debug(decision.describe())

        if decision.command is not None:
            await self._send_command(actuator, decision.command)
        self.metrics.set_relay_state(decision.relay_on)

        self.cycles += 1
        return decision

    async def run_forever(self):
        logger.info("Starting fan control loop")
        while True:
            await self.run_cycle()
            await self.sleep(self.settings.POLL_INTERVAL)
