import logging
import math
import unittest

from simulator.conveyor_belt import BeltSpeed, ConveyorBeltSimulator


class ScriptedRandom:
    """Returns the given draws in order."""

    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


class ConstantRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


class TestConstruction(unittest.TestCase):
    def test_initial_state(self):
        belt = ConveyorBeltSimulator(1, rng=ConstantRandom(0.5))
        self.assertEqual(belt.speed, BeltSpeed.STOPPED)
        self.assertEqual(belt.package_count, 0)
        self.assertEqual(belt.stopped_seconds, 0)
        self.assertEqual(belt.temperature, 60.0)
        self.assertEqual(belt.elapsed_seconds, 0)
        self.assertIsNone(belt.forced)
        self.assertIsNone(belt.increasing)
        self.assertEqual(belt.forced_amplitude, 0.0)
        self.assertEqual(belt.increasing_amplitude, 0.0)

    def test_natural_amplitude_uses_first_draw(self):
        belt = ConveyorBeltSimulator(1, rng=ConstantRandom(0.5))
        self.assertEqual(belt.natural_amplitude, 3.0)

    def test_natural_amplitude_range_with_seeds(self):
        for seed in range(20):
            belt = ConveyorBeltSimulator(1, rng=seed)
            self.assertGreaterEqual(belt.natural_amplitude, 2.0)
            self.assertLess(belt.natural_amplitude, 4.0)


class TestSpeedTransitions(unittest.TestCase):
    def test_stays_stopped_at_half(self):
        belt = ConveyorBeltSimulator(1, rng=ConstantRandom(0.5))

        reading = belt.tick()

        self.assertEqual(reading, 0)
        self.assertEqual(belt.speed, BeltSpeed.STOPPED)
        self.assertEqual(belt.stopped_seconds, 1)
        self.assertEqual(belt.package_count, 0)
        self.assertEqual(belt.temperature, 60.0)

    def test_restart_threshold_not_met(self):
        belt = ConveyorBeltSimulator(
            1, rng=ScriptedRandom([0.0, 0.5]), natural_amplitude=3.0
        )
        belt.tick()
        self.assertEqual(belt.speed, BeltSpeed.STOPPED)

    def test_restart_threshold_met(self):
        # speed, forced gate, increasing gate, temperature
        belt = ConveyorBeltSimulator(
            1, rng=ScriptedRandom([0.8, 0.5, 0.5, 0.5]), natural_amplitude=3.0
        )

        reading = belt.tick()

        self.assertEqual(belt.speed, BeltSpeed.SLOW)
        self.assertEqual(reading, 0.0)   # 3 * sin(0)
        self.assertEqual(belt.stopped_seconds, 0)
        self.assertEqual(belt.package_count, 1)

    def test_fast_second_check_overrides_stop(self):
        belt = ConveyorBeltSimulator(
            1,
            rng=ScriptedRandom([0.0, 0.99, 0.5, 0.5, 0.5]),
            natural_amplitude=3.0,
            speed=BeltSpeed.FAST,
        )
        belt.tick()
        self.assertEqual(belt.speed, BeltSpeed.SLOW)

    def test_fast_stops(self):
        belt = ConveyorBeltSimulator(
            1,
            rng=ScriptedRandom([0.0, 0.5, 0.5]),
            natural_amplitude=3.0,
            speed=BeltSpeed.FAST,
        )
        self.assertEqual(belt.tick(), 0)
        self.assertEqual(belt.speed, BeltSpeed.STOPPED)
        self.assertEqual(belt.stopped_seconds, 1)

    def test_slow_speeds_up(self):
        belt = ConveyorBeltSimulator(
            1,
            rng=ScriptedRandom([0.5, 0.96, 0.5, 0.5, 0.5]),
            natural_amplitude=3.0,
            speed=BeltSpeed.SLOW,
        )
        belt.tick()
        self.assertEqual(belt.speed, BeltSpeed.FAST)
        self.assertEqual(belt.package_count, 2)


class TestStoppedBelt(unittest.TestCase):
    def test_stopped_seconds_accumulate(self):
        belt = ConveyorBeltSimulator(2, rng=ConstantRandom(0.1))

        for n in range(1, 6):
            self.assertEqual(belt.tick(), 0)
            self.assertEqual(belt.speed, BeltSpeed.STOPPED)
            self.assertEqual(belt.stopped_seconds, n * 2)

        self.assertEqual(belt.package_count, 0)
        self.assertAlmostEqual(belt.temperature, 60.0 - 5 * 0.4, places=9)

    def test_stopped_seconds_reset_after_restart(self):
        belt = ConveyorBeltSimulator(
            1,
            rng=ScriptedRandom([0.0, 0.5, 0.8, 0.5, 0.5, 0.5]),
            natural_amplitude=3.0,
        )

        belt.tick()
        self.assertEqual(belt.stopped_seconds, 1)

        belt.tick()
        self.assertEqual(belt.speed, BeltSpeed.SLOW)
        self.assertEqual(belt.stopped_seconds, 0)

    def test_stop_clears_transients(self):
        belt = ConveyorBeltSimulator(
            1,
            rng=ScriptedRandom([
                0.5, 0.5, 0.05, 0.5, 0.01, 0.5, 0.5,   # both activate
                0.0, 0.5, 0.5,                          # belt stops
            ]),
            natural_amplitude=3.0,
            speed=BeltSpeed.FAST,
        )

        belt.tick()
        self.assertIsNotNone(belt.forced)
        self.assertIsNotNone(belt.increasing)

        self.assertEqual(belt.tick(), 0)
        self.assertIsNone(belt.forced)
        self.assertIsNone(belt.increasing)


class TestVibration(unittest.TestCase):
    def test_natural_only_reading(self):
        belt = ConveyorBeltSimulator(
            0.5,
            rng=ConstantRandom(0.5),
            natural_amplitude=3.0,
            speed=BeltSpeed.FAST,
        )

        for n in range(10):
            before = belt.elapsed_seconds
            reading = belt.tick()

            self.assertEqual(belt.speed, BeltSpeed.FAST)
            self.assertAlmostEqual(reading, 3.0 * math.sin(before), delta=1e-9)
            self.assertEqual(belt.package_count, n + 1)

        self.assertIsNone(belt.forced)
        self.assertIsNone(belt.increasing)

    def test_forced_vibration(self):
        belt = ConveyorBeltSimulator(
            1,
            rng=ScriptedRandom([
                0.5, 0.5, 0.05, 0.5, 0.5, 0.5,   # forced starts, amplitude 4
                0.5, 0.5, 0.5, 0.5, 0.5,         # forced stays
                0.5, 0.5, 0.995, 0.5, 0.5,       # forced stops
            ]),
            natural_amplitude=3.0,
            speed=BeltSpeed.FAST,
        )

        self.assertAlmostEqual(belt.tick(), 0.0, delta=1e-9)
        self.assertEqual(belt.forced_amplitude, 4.0)
        self.assertEqual(belt.forced_elapsed, 1)

        expected = 3.0 * math.sin(1) + 4.0 * math.sin(0.75) * math.sin(10)
        self.assertAlmostEqual(belt.tick(), expected, delta=1e-9)
        self.assertEqual(belt.forced_elapsed, 2)

        self.assertAlmostEqual(belt.tick(), 3.0 * math.sin(2), delta=1e-9)
        self.assertIsNone(belt.forced)
        self.assertEqual(belt.forced_amplitude, 0.0)

    def test_forced_vibration_halved_when_slow(self):
        belt = ConveyorBeltSimulator(
            1,
            rng=ScriptedRandom([0.5, 0.5, 0.05, 0.5, 0.5, 0.5]),
            natural_amplitude=3.0,
            speed=BeltSpeed.SLOW,
        )
        belt.tick()
        self.assertEqual(belt.forced_amplitude, 2.0)

    def test_increasing_vibration_doubled_when_slow(self):
        belt = ConveyorBeltSimulator(
            1,
            rng=ScriptedRandom([
                0.5, 0.5, 0.5, 0.01, 0.5, 0.5,   # increasing starts, 150 * 2
                0.5, 0.5, 0.5, 0.5, 0.5,
            ]),
            natural_amplitude=3.0,
            speed=BeltSpeed.SLOW,
        )

        belt.tick()
        self.assertEqual(belt.increasing_amplitude, 300.0)
        self.assertEqual(belt.increasing_elapsed, 1)

        expected = 3.0 * math.sin(1) + (1 / 300.0) * math.sin(1)
        self.assertAlmostEqual(belt.tick(), expected, delta=1e-9)
        self.assertEqual(belt.increasing_elapsed, 2)

    def test_increasing_start_threshold(self):
        belt = ConveyorBeltSimulator(
            1,
            rng=ScriptedRandom([0.5, 0.5, 0.5, 0.06, 0.5]),
            natural_amplitude=3.0,
            speed=BeltSpeed.FAST,
        )
        belt.tick()
        self.assertIsNone(belt.increasing)

    def test_transient_start_is_logged(self):
        log = logging.getLogger("test.conveyor")
        belt = ConveyorBeltSimulator(
            1,
            rng=ScriptedRandom([0.5, 0.5, 0.05, 0.5, 0.5, 0.5]),
            logger=log,
            natural_amplitude=3.0,
            speed=BeltSpeed.FAST,
        )

        with self.assertLogs(log, level="WARNING") as cm:
            belt.tick()

        self.assertIn("Forced vibration starting with severity: 4.00", cm.output[0])


class TestProperties(unittest.TestCase):
    def test_seeded_runs_are_identical(self):
        a = ConveyorBeltSimulator(1, rng=42)
        b = ConveyorBeltSimulator(1, rng=42)

        readings_a = []
        readings_b = []
        for _ in range(300):
            readings_a.append(a.tick())
            readings_b.append(b.tick())
            self.assertEqual(
                (a.speed, a.package_count, a.stopped_seconds, a.temperature,
                 a.forced_amplitude, a.increasing_amplitude),
                (b.speed, b.package_count, b.stopped_seconds, b.temperature,
                 b.forced_amplitude, b.increasing_amplitude),
            )

        self.assertEqual(readings_a, readings_b)

    def test_instances_do_not_share_generator(self):
        a = ConveyorBeltSimulator(1, rng=7)
        b = ConveyorBeltSimulator(1, rng=7)

        for _ in range(50):
            a.tick()

        c = ConveyorBeltSimulator(1, rng=7)
        self.assertEqual(
            [b.tick() for _ in range(50)],
            [c.tick() for _ in range(50)],
        )

    def test_invariants_over_long_run(self):
        belt = ConveyorBeltSimulator(2, rng=3)
        previous_packages = 0
        stopped_ticks = 0

        for n in range(1, 1001):
            reading = belt.tick()

            self.assertEqual(belt.elapsed_seconds, n * 2)
            self.assertGreaterEqual(belt.package_count, previous_packages)
            previous_packages = belt.package_count

            if belt.speed is BeltSpeed.STOPPED:
                stopped_ticks += 1
                self.assertEqual(reading, 0)
                self.assertEqual(belt.stopped_seconds, stopped_ticks * 2)
            else:
                stopped_ticks = 0
                self.assertEqual(belt.stopped_seconds, 0)


if __name__ == "__main__":
    unittest.main()
