import argparse
import json
import logging

from config.config_loader import configure_logging, load_config
from core.telemetry_history import TelemetryHistory
from raw_ingest.mqtt_listener import start_mqtt_listener

logger = logging.getLogger(__name__)


class OperatorConsole:
    """
    Receives device telemetry and reports it.
    Any application property equal to "true" is an alert.
    """

    def __init__(self, history_window=60):
        self.history = TelemetryHistory(window_size=history_window)
        self.received = 0

    def on_telemetry(self, device_id, properties, payload):
        self.received += 1
        self.history.append(device_id, payload)

        logger.info("Telemetry received from %s: %s", device_id, json.dumps(payload))

        alerts = self.alerts(properties)
        for name in alerts:
            logger.warning("%s: %s", device_id, name)

        for field in ("vibration", "temperature"):
            stats = self.history.summary(device_id, field)
            if stats and field in payload:
                logger.debug(
                    "%s %s | n=%d mean=%.2f rms=%.2f peak=%.2f",
                    device_id,
                    field,
                    stats["count"],
                    stats["mean"],
                    stats["rms"],
                    stats["peak"],
                )

        return alerts

    @staticmethod
    def alerts(properties: dict) -> list:
        return [name for name, value in properties.items() if value == "true"]


def main(argv=None):
    parser = argparse.ArgumentParser(description="Device telemetry operator console")
    parser.add_argument("--config", help="YAML config file")
    args = parser.parse_args(argv)

    config = load_config(args.config)
    configure_logging(config)

    console = OperatorConsole(history_window=config["console"]["history_window"])

    logger.info("Operator console started")

    try:
        start_mqtt_listener(
            callback=console.on_telemetry,
            broker=config["mqtt"]["broker"],
            port=config["mqtt"]["port"],
            base_topic=config["mqtt"]["base_topic"],
            keepalive=config["mqtt"]["keepalive"],
            ca_certs=config["mqtt"].get("ca_certs"),
        )
    except KeyboardInterrupt:
        logger.info("Stopped by user (%d messages received)", console.received)


if __name__ == "__main__":
    main()
