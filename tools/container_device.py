import argparse
import json
import logging
import time

from config.config_loader import configure_logging, load_config
from publish.mqtt_publisher import MQTTPublisher
from publish.telemetry_message import build_container_telemetry
from simulator.environment_sensor import EnvironmentSensor

logger = logging.getLogger(__name__)

DEVICE_ID = "sensor-thl-2001"


class ContainerDevice:
    """
    Container environment device.
    Send interval follows the twin's desired "telemetryDelay" (seconds)
    and is echoed back as a reported property.
    """

    def __init__(self, sensor, publisher, device_id=DEVICE_ID, telemetry_delay=1, temperature_alert=30):
        self.sensor = sensor
        self.publisher = publisher
        self.device_id = device_id
        self.telemetry_delay = telemetry_delay
        self.temperature_alert = temperature_alert

    # =========================================================
    # DEVICE TWIN
    # =========================================================
    def on_desired_properties(self, desired: dict):
        logger.info("Desired twin properties changed: %s", json.dumps(desired))

        # null or missing telemetryDelay keeps the current delay
        delay = desired.get("telemetryDelay")
        if delay is not None:
            self.telemetry_delay = int(delay)

        self.publisher.report_properties(
            self.device_id,
            {"telemetryDelay": self.telemetry_delay},
        )

    # =========================================================
    # TELEMETRY LOOP
    # =========================================================
    def run(self, max_iterations=None, sleep=time.sleep):
        iterations = 0

        while max_iterations is None or iterations < max_iterations:
            message = build_container_telemetry(
                self.sensor.read_temperature(),
                self.sensor.read_humidity(),
                self.sensor.read_pressure(),
                self.sensor.read_location(),
                temperature_alert=self.temperature_alert,
            )

            self.publisher.send_message(self.device_id, message)
            logger.info("Sending message: %s", message.to_json())

            iterations += 1
            sleep(self.telemetry_delay)

        return iterations


def main(argv=None):
    parser = argparse.ArgumentParser(description="Container device with twin-controlled telemetry delay")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--device-id", default=DEVICE_ID)
    args = parser.parse_args(argv)

    config = load_config(args.config)
    configure_logging(config)
    mqtt_cfg = config["mqtt"]

    publisher = MQTTPublisher(
        broker=mqtt_cfg["broker"],
        port=mqtt_cfg["port"],
        base_topic=mqtt_cfg["base_topic"],
        keepalive=mqtt_cfg["keepalive"],
        ca_certs=mqtt_cfg.get("ca_certs"),
    )

    device = ContainerDevice(
        EnvironmentSensor(),
        publisher,
        device_id=args.device_id,
        temperature_alert=config["alerts"]["temperature_c"],
    )

    publisher.on_desired_properties(args.device_id, device.on_desired_properties)

    # report the starting delay before the first desired patch arrives
    device.on_desired_properties({})

    try:
        device.run()
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    finally:
        publisher.stop()


if __name__ == "__main__":
    main()
