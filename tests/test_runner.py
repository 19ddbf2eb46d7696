import json
import unittest

from fakes import FakePublisher
from runner import build_simulator, run
from simulator.conveyor_belt import BeltSpeed, ConveyorBeltSimulator


class ConstantRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


class TestBuildSimulator(unittest.TestCase):
    def test_valid_config(self):
        belt = build_simulator({"interval_sec": 2, "seed": 1})
        self.assertEqual(belt.interval_seconds, 2)
        self.assertEqual(belt.speed, BeltSpeed.STOPPED)

    def test_invalid_interval(self):
        for interval in (0, -1, None, "2", True):
            with self.assertRaises(ValueError):
                build_simulator({"interval_sec": interval})


class TestDeviceLoop(unittest.TestCase):
    def setUp(self):
        self.sleeps = []
        # 0.1 keeps the belt stopped
        self.belt = ConveyorBeltSimulator(2, rng=ConstantRandom(0.1))

    def test_sends_telemetry_then_log_each_tick(self):
        publisher = FakePublisher()

        ticks = run(self.belt, publisher, "belt-1", max_ticks=3, sleep=self.sleeps.append)

        self.assertEqual(ticks, 3)
        self.assertEqual(self.sleeps, [2, 2, 2])
        self.assertEqual(
            [m.properties["sensorID"] for _, m, _ in publisher.sent],
            ["VSTel", "VSLog"] * 3,
        )
        self.assertTrue(all(device_id == "belt-1" for device_id, _, _ in publisher.sent))

        _, log_record, _ = publisher.sent[1]
        self.assertEqual(json.loads(log_record.to_json())["speed"], "stopped")

    def test_belt_alert_once_stopped_long_enough(self):
        publisher = FakePublisher()

        with self.assertLogs("runner", level="WARNING"):
            run(self.belt, publisher, "belt-1", max_ticks=3, sleep=self.sleeps.append)

        alerts = [m.properties["beltAlert"] for _, m, _ in publisher.sent if m.properties["sensorID"] == "VSTel"]
        # stopped for 2s, 4s, 6s
        self.assertEqual(alerts, ["false", "false", "true"])

    def test_send_failure_does_not_stop_loop(self):
        publisher = FakePublisher(fail_on="VSTel")

        with self.assertLogs("runner", level="ERROR"):
            ticks = run(self.belt, publisher, "belt-1", max_ticks=2, sleep=self.sleeps.append)

        self.assertEqual(ticks, 2)
        self.assertEqual([m.properties["sensorID"] for _, m, _ in publisher.sent], ["VSLog", "VSLog"])

    def test_qos_is_forwarded(self):
        publisher = FakePublisher()
        run(self.belt, publisher, "belt-1", qos=0, max_ticks=1, sleep=self.sleeps.append)
        self.assertEqual({qos for _, _, qos in publisher.sent}, {0})


if __name__ == "__main__":
    unittest.main()
