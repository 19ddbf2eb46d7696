import argparse
import logging
import time

from config.config_loader import configure_logging, load_config
from publish.mqtt_publisher import MQTTPublisher
from publish.telemetry_message import build_environment_telemetry
from simulator.environment_sensor import EnvironmentSensor

logger = logging.getLogger(__name__)

DEVICE_ID = "cave-device-01"
INTERVAL_SEC = 10


def run(
    sensor,
    publisher,
    device_id=DEVICE_ID,
    temperature_alert=30,
    interval=INTERVAL_SEC,
    max_iterations=None,
    sleep=time.sleep,
):
    iterations = 0

    while max_iterations is None or iterations < max_iterations:
        message = build_environment_telemetry(
            sensor.read_temperature(),
            sensor.read_humidity(),
            temperature_alert=temperature_alert,
        )

        publisher.send_message(device_id, message)
        logger.info("Sending message: %s", message.to_json())

        iterations += 1
        sleep(interval)

    return iterations


def main(argv=None):
    parser = argparse.ArgumentParser(description="Simulated cave environment device")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--device-id", default=DEVICE_ID)
    parser.add_argument("--interval", type=float, default=INTERVAL_SEC, help="seconds between messages")
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

    try:
        run(
            EnvironmentSensor(),
            publisher,
            device_id=args.device_id,
            temperature_alert=config["alerts"]["temperature_c"],
            interval=args.interval,
        )
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    finally:
        publisher.stop()


if __name__ == "__main__":
    main()
