# simulator/environment_sensor.py

import logging
import time

import numpy as np

logger = logging.getLogger(__name__)


def _make_rng(rng):
    if rng is None or isinstance(rng, int):
        return np.random.default_rng(rng)
    return rng


class EnvironmentSensor:
    """
    Temperature / humidity / pressure / location sensor.
    Every read is independent (no drift).
    """

    def __init__(
        self,
        min_temperature=20.0,
        min_humidity=60.0,
        min_pressure=1013.25,
        min_latitude=39.810492,
        min_longitude=-98.556061,
        rng=None,
    ):
        self.min_temperature = min_temperature
        self.min_humidity = min_humidity
        self.min_pressure = min_pressure
        self.min_latitude = min_latitude
        self.min_longitude = min_longitude
        self._rng = _make_rng(rng)

    def read_temperature(self) -> float:
        return self.min_temperature + float(self._rng.random()) * 15

    def read_humidity(self) -> float:
        return self.min_humidity + float(self._rng.random()) * 20

    def read_pressure(self) -> float:
        return self.min_pressure + float(self._rng.random()) * 12

    def read_location(self):
        """
        (latitude, longitude)
        """
        latitude = self.min_latitude + float(self._rng.random()) * 0.5
        longitude = self.min_longitude + float(self._rng.random()) * 0.5
        return latitude, longitude


class RangedSensor:
    """
    Base for drifting sensors.
    Each reading moves up to +/-5% from the previous one and stays
    inside [min, max].
    """

    DRIFT_PERCENT = 5.0

    def __init__(
        self,
        temperature_min,
        temperature_max,
        humidity_min,
        humidity_max,
        initial_temperature,
        initial_humidity,
        rng=None,
    ):
        self.temperature_min = temperature_min
        self.temperature_max = temperature_max
        self.humidity_min = humidity_min
        self.humidity_max = humidity_max

        self.temperature = initial_temperature
        self.humidity = initial_humidity

        self._rng = _make_rng(rng)

    def _next_value(self, current, low, high):
        drift = (self.DRIFT_PERCENT / 100) * (2 * float(self._rng.random()) - 1)
        return float(np.clip(current * (1 + drift), low, high))

    def read_temperature(self) -> float:
        self.temperature = self._next_value(
            self.temperature, self.temperature_min, self.temperature_max
        )
        return self.temperature

    def read_humidity(self) -> float:
        self.humidity = self._next_value(
            self.humidity, self.humidity_min, self.humidity_max
        )
        return self.humidity


class Vehicle(RangedSensor):
    pass


class Container(RangedSensor):
    """
    Shipping container carried alternately by truck and airplane.
    Its ranges follow whichever vehicle is currently carrying it.
    """

    def __init__(
        self,
        truck: Vehicle,
        airplane: Vehicle,
        initial_temperature,
        initial_humidity,
        transport_max_duration=30.0,
        clock=time.monotonic,
        rng=None,
    ):
        super().__init__(
            truck.temperature_min,
            truck.temperature_max,
            truck.humidity_min,
            truck.humidity_max,
            initial_temperature,
            initial_humidity,
            rng=rng,
        )
        self.truck = truck
        self.airplane = airplane
        self.transport_max_duration = transport_max_duration

        self._clock = clock
        self._last_transport_change = clock()
        self.on_truck = True

    @property
    def transport(self) -> str:
        return "TRUCK" if self.on_truck else "AIRPLANE"

    def update_transport(self):
        now = self._clock()

        if now - self._last_transport_change > self.transport_max_duration:
            self.on_truck = not self.on_truck
            self._last_transport_change = now
            logger.info("CONTAINER transport changed to: %s", self.transport)

        vehicle = self.truck if self.on_truck else self.airplane

        self.temperature_min = vehicle.temperature_min
        self.temperature_max = vehicle.temperature_max
        self.humidity_min = vehicle.humidity_min
        self.humidity_max = vehicle.humidity_max
