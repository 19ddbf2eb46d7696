# simulator/conveyor_belt.py

import logging
from enum import Enum

import numpy as np


class BeltSpeed(Enum):
    STOPPED = "stopped"
    SLOW = "slow"
    FAST = "fast"


class TransientVibration:
    """
    Active unwanted vibration component.
    Inactive components are represented by None on the simulator.
    """

    def __init__(self, amplitude: float):
        self.amplitude = amplitude
        self.elapsed_seconds = 0.0

    def __repr__(self):
        return (
            f"TransientVibration(amplitude={self.amplitude!r}, "
            f"elapsed_seconds={self.elapsed_seconds!r})"
        )


class ConveyorBeltSimulator:
    """
    Conveyor Belt Vibration Simulator
    =================================
    Discrete-time physical state advanced once per tick.

    Vibration = natural (always on)
              + forced (random start / stop)
              + increasing (random start / stop, grows with time)

    rng:
        anything with random() -> float in [0, 1).
        None or an int seed creates a private numpy Generator.
    """

    # =========================================================
    # PROBABILITIES (per tick)
    # =========================================================
    SPEED_STOP_PROB = 0.01
    SPEED_CHANGE_THRESHOLD = 0.95
    RESTART_THRESHOLD = 0.75

    FORCED_START_PROB = 0.1
    INCREASING_START_PROB = 0.05
    TRANSIENT_STOP_THRESHOLD = 0.99

    # =========================================================
    # PRODUCTION
    # =========================================================
    PACKAGES_PER_SECOND = {
        BeltSpeed.FAST: 2,
        BeltSpeed.SLOW: 1,
        BeltSpeed.STOPPED: 0,
    }

    def __init__(
        self,
        interval_seconds: float,
        rng=None,
        logger=None,
        natural_amplitude=None,
        speed: BeltSpeed = BeltSpeed.STOPPED,
        temperature: float = 60.0,
    ):
        if rng is None or isinstance(rng, int):
            rng = np.random.default_rng(rng)

        self._rng = rng
        self._log = logger or logging.getLogger(__name__)
        self.interval_seconds = interval_seconds

        # ---- Belt state ----
        self._speed = speed
        self._package_count = 0
        self._stopped_seconds = 0.0
        self._temperature = temperature
        self._elapsed_seconds = 0.0

        # ---- Vibration state ----
        if natural_amplitude is None:
            natural_amplitude = 2 + 2 * self._draw()   # [2, 4)
        self.natural_amplitude = natural_amplitude

        self.forced = None
        self.increasing = None

    # =========================================================
    # READ-ONLY STATE
    # =========================================================
    @property
    def speed(self) -> BeltSpeed:
        return self._speed

    @property
    def package_count(self) -> int:
        return self._package_count

    @property
    def stopped_seconds(self) -> float:
        return self._stopped_seconds

    @property
    def temperature(self) -> float:
        return self._temperature

    @property
    def elapsed_seconds(self) -> float:
        return self._elapsed_seconds

    @property
    def forced_amplitude(self) -> float:
        return self.forced.amplitude if self.forced else 0.0

    @property
    def forced_elapsed(self) -> float:
        return self.forced.elapsed_seconds if self.forced else 0.0

    @property
    def increasing_amplitude(self) -> float:
        return self.increasing.amplitude if self.increasing else 0.0

    @property
    def increasing_elapsed(self) -> float:
        return self.increasing.elapsed_seconds if self.increasing else 0.0

    # =========================================================
    # INTERNAL
    # =========================================================
    def _draw(self) -> float:
        return float(self._rng.random())

    def _update_speed(self):
        # Both checks run with fresh draws; the second one wins.
        if self._speed is BeltSpeed.FAST:
            if self._draw() < self.SPEED_STOP_PROB:
                self._speed = BeltSpeed.STOPPED
            if self._draw() > self.SPEED_CHANGE_THRESHOLD:
                self._speed = BeltSpeed.SLOW

        elif self._speed is BeltSpeed.SLOW:
            if self._draw() < self.SPEED_STOP_PROB:
                self._speed = BeltSpeed.STOPPED
            if self._draw() > self.SPEED_CHANGE_THRESHOLD:
                self._speed = BeltSpeed.FAST

        else:
            if self._draw() > self.RESTART_THRESHOLD:
                self._speed = BeltSpeed.SLOW

    def _update_forced(self):
        if self.forced is None:
            if self._draw() < self.FORCED_START_PROB:
                amplitude = 1 + 6 * self._draw()       # [1, 7)
                if self._speed is BeltSpeed.SLOW:
                    amplitude /= 2
                self.forced = TransientVibration(amplitude)
                self._log.warning(
                    "Forced vibration starting with severity: %.2f", amplitude
                )
        elif self._draw() > self.TRANSIENT_STOP_THRESHOLD:
            self.forced = None
            self._log.info("Forced vibration stopped")
        else:
            self._log.debug(
                "Forced vibration: %.1f active for %.0fs",
                self.forced.amplitude,
                self.forced.elapsed_seconds,
            )

    def _update_increasing(self):
        if self.increasing is None:
            if self._draw() < self.INCREASING_START_PROB:
                amplitude = 100 + 100 * self._draw()   # [100, 200)
                if self._speed is BeltSpeed.SLOW:
                    amplitude *= 2                     # longer period
                self.increasing = TransientVibration(amplitude)
                self._log.warning(
                    "Increasing vibration starting with severity: %.2f",
                    amplitude,
                )
        elif self._draw() > self.TRANSIENT_STOP_THRESHOLD:
            self.increasing = None
            self._log.info("Increasing vibration stopped")
        else:
            self._log.debug(
                "Increasing vibration: %.1f active for %.0fs",
                self.increasing.amplitude,
                self.increasing.elapsed_seconds,
            )

    def _read_vibration(self) -> float:
        if self._speed is BeltSpeed.STOPPED:
            self.forced = None
            self.increasing = None
            self._stopped_seconds += self.interval_seconds
            return 0.0

        self._stopped_seconds = 0.0

        self._update_forced()
        self._update_increasing()

        vibration = self.natural_amplitude * np.sin(self._elapsed_seconds)

        if self.forced is not None:
            t = self.forced.elapsed_seconds
            vibration += (
                self.forced.amplitude * np.sin(0.75 * t) * np.sin(10 * t)
            )
            self.forced.elapsed_seconds += self.interval_seconds

        if self.increasing is not None:
            t = self.increasing.elapsed_seconds
            vibration += (t / self.increasing.amplitude) * np.sin(t)
            self.increasing.elapsed_seconds += self.interval_seconds

        return float(vibration)

    # =========================================================
    # PUBLIC API
    # =========================================================
    def tick(self) -> float:
        """
        Advance the belt by one interval and return its vibration reading.
        """
        self._update_speed()

        vibration = self._read_vibration()

        self._elapsed_seconds += self.interval_seconds

        self._package_count += int(
            self.PACKAGES_PER_SECOND[self._speed] * self.interval_seconds
        )

        self._temperature += self._draw() - 0.5

        return vibration
