import json
import logging
from urllib.parse import parse_qsl

import paho.mqtt.client as mqtt

from publish.mqtt_publisher import trust_ca_certificate

logger = logging.getLogger(__name__)


def start_mqtt_listener(
    callback,
    broker: str,
    port: int,
    base_topic: str = "devices",
    keepalive: int = 60,
    client=None,
    ca_certs=None,
):
    """
    Device-to-cloud MQTT Listener
    -----------------------------
    Subscribed Topic:
        {base_topic}/+/messages/events/#

    Callback signature:
        callback(
            device_id: str,
            properties: dict,
            payload: dict
        )
    """

    topic = f"{base_topic}/+/messages/events/#"

    # =========================================================
    # ON CONNECT
    # =========================================================
    def on_connect(client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            logger.error("Connection failed: %s", reason_code)
            return

        logger.info("Connected to %s:%s", broker, port)
        client.subscribe(topic)
        logger.info("Subscribed to: %s", topic)

    # =========================================================
    # ON MESSAGE
    # =========================================================
    def on_message(client, userdata, msg):
        try:
            device_id, properties = parse_topic(msg.topic)
            payload = json.loads(msg.payload.decode(properties.get("$.ce", "utf-8")))

            callback(
                device_id=device_id,
                properties=properties,
                payload=payload,
            )

        except Exception:
            logger.exception("Message processing error on %s", msg.topic)

    # =========================================================
    # CLIENT INIT
    # =========================================================
    if client is None:
        client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)

    if ca_certs:
        trust_ca_certificate(client, ca_certs)

    client.on_connect = on_connect
    client.on_message = on_message

    client.connect(broker, port, keepalive=keepalive)
    client.loop_forever()

    return client


# =========================================================
# TOPIC PARSER
# =========================================================
def parse_topic(topic: str):
    """
    Supported format:
        <BASE...>/<DEVICE_ID>/messages/events/<k1=v1&k2=v2>

    The property segment may be empty.
    """

    parts = topic.split("/")

    if len(parts) < 5 or parts[-3:-1] != ["messages", "events"] or not parts[-4]:
        raise ValueError(f"Invalid event topic format: {topic}")

    device_id = parts[-4]
    properties = dict(parse_qsl(parts[-1], keep_blank_values=True))

    return device_id, properties
