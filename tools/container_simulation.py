import argparse
import logging
import time

import numpy as np

from config.config_loader import configure_logging, load_config
from publish.mqtt_publisher import MQTTPublisher
from publish.telemetry_message import build_environment_telemetry
from simulator.environment_sensor import Container, Vehicle

logger = logging.getLogger(__name__)

# ==========================================================
# VEHICLE RANGES
# ==========================================================
TRUCK = {
    "temperature_min": 20,
    "temperature_max": 40,
    "humidity_min": 45,
    "humidity_max": 65,
    "initial_temperature": 20,
    "initial_humidity": 60,
}

AIRPLANE = {
    "temperature_min": 0,
    "temperature_max": 25,
    "humidity_min": 35,
    "humidity_max": 50,
    "initial_temperature": 15,
    "initial_humidity": 45,
}

CONTAINER_INITIAL = {
    "initial_temperature": 20,
    "initial_humidity": 45,
}

DEVICE_IDS = {
    "truck": "truck",
    "airplane": "airplane",
    "container": "container",
}

INTERVAL_SEC = 1


def build_devices(rng=None, clock=time.monotonic):
    # one generator shared by all three devices
    if rng is None or isinstance(rng, int):
        rng = np.random.default_rng(rng)

    truck = Vehicle(**TRUCK, rng=rng)
    airplane = Vehicle(**AIRPLANE, rng=rng)
    container = Container(
        truck=truck,
        airplane=airplane,
        clock=clock,
        rng=rng,
        **CONTAINER_INITIAL,
    )
    return {"truck": truck, "airplane": airplane, "container": container}


# ==========================================================
# MAIN LOOP
# ==========================================================
def run(devices, publisher, max_iterations=None, sleep=time.sleep):
    iterations = 0

    while max_iterations is None or iterations < max_iterations:
        devices["container"].update_transport()

        for name, sensor in devices.items():
            message = build_environment_telemetry(
                sensor.read_temperature(),
                sensor.read_humidity(),
            )
            publisher.send_message(DEVICE_IDS[name], message)
            logger.info("Sending %s message: %s", name.upper(), message.to_json())

        iterations += 1
        sleep(INTERVAL_SEC)

    return iterations


def main(argv=None):
    parser = argparse.ArgumentParser(description="Truck / airplane / container simulation")
    parser.add_argument("--config", help="YAML config file")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    configure_logging(config)
    mqtt_cfg = config["mqtt"]

    logger.info("Container Simulation started (transport changes every 30s)")

    publisher = MQTTPublisher(
        broker=mqtt_cfg["broker"],
        port=mqtt_cfg["port"],
        base_topic=mqtt_cfg["base_topic"],
        keepalive=mqtt_cfg["keepalive"],
        ca_certs=mqtt_cfg.get("ca_certs"),
    )

    try:
        run(build_devices(), publisher)
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    finally:
        publisher.stop()


if __name__ == "__main__":
    main()
