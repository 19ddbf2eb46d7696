import argparse
import logging
import time

from config.config_loader import configure_logging, load_config
from publish.mqtt_publisher import MQTTPublisher
from publish.telemetry_message import (
    build_vibration_log,
    build_vibration_telemetry,
)
from simulator.conveyor_belt import ConveyorBeltSimulator

logger = logging.getLogger(__name__)


# ==================================================
# FACTORY (config validation lives here, not in tick)
# ==================================================
def build_simulator(device_cfg: dict) -> ConveyorBeltSimulator:
    interval = device_cfg.get("interval_sec")

    if not isinstance(interval, (int, float)) or isinstance(interval, bool):
        raise ValueError(f"device.interval_sec must be a number, got {interval!r}")
    if interval <= 0:
        raise ValueError(f"device.interval_sec must be positive, got {interval}")

    return ConveyorBeltSimulator(
        interval_seconds=interval,
        rng=device_cfg.get("seed"),
    )


# ==================================================
# DEVICE LOOP
# ==================================================
def run(
    belt,
    publisher,
    device_id,
    stopped_alert_seconds=5,
    qos=1,
    max_ticks=None,
    sleep=time.sleep,
):
    """
    One tick per interval:
    vibration telemetry (VSTel) first, then the log record (VSLog).
    """
    ticks = 0

    while max_ticks is None or ticks < max_ticks:
        vibration = belt.tick()
        ticks += 1

        telemetry = build_vibration_telemetry(belt, vibration, stopped_alert_seconds)
        log_record = build_vibration_log(belt, vibration, stopped_alert_seconds)

        for message in (telemetry, log_record):
            try:
                publisher.send_message(device_id, message, qos=qos)
                logger.info("%s sent: %s", message.properties["sensorID"], message.to_json())
            except Exception:
                logger.exception("Failed to send %s", message.properties["sensorID"])

        if telemetry.properties["beltAlert"] == "true":
            logger.warning("Belt stopped for %.0fs", belt.stopped_seconds)

        sleep(belt.interval_seconds)

    return ticks


def main(argv=None):
    parser = argparse.ArgumentParser(description="Conveyor belt vibration device")
    parser.add_argument("--config", help="YAML config file")
    parser.add_argument("--ticks", type=int, default=None, help="stop after N ticks")
    args = parser.parse_args(argv)

    # =========================
    # LOAD CONFIG
    # =========================
    config = load_config(args.config)
    configure_logging(config)

    device_cfg = config["device"]
    mqtt_cfg = config["mqtt"]

    belt = build_simulator(device_cfg)

    logger.info("Vibration sensor device app (%s)", device_cfg["device_id"])

    # =========================
    # PUBLISHER
    # =========================
    publisher = MQTTPublisher(
        broker=mqtt_cfg["broker"],
        port=mqtt_cfg["port"],
        base_topic=mqtt_cfg["base_topic"],
        keepalive=mqtt_cfg["keepalive"],
        ca_certs=mqtt_cfg.get("ca_certs"),
    )

    try:
        run(
            belt,
            publisher,
            device_cfg["device_id"],
            stopped_alert_seconds=config["alerts"]["belt_stopped_sec"],
            qos=mqtt_cfg["qos"],
            max_ticks=args.ticks,
        )
    except KeyboardInterrupt:
        logger.info("Stopped by user")
    finally:
        publisher.stop()
        logger.info("Disconnected")


if __name__ == "__main__":
    main()
