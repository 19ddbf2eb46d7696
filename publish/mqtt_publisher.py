import itertools
import json
import logging
from pathlib import Path
from urllib.parse import urlencode

import paho.mqtt.client as mqtt

logger = logging.getLogger(__name__)


def event_topic(base_topic, device_id, properties=None) -> str:
    """
    {base}/{device_id}/messages/events/{url-encoded properties}
    """
    topic = f"{base_topic}/{device_id}/messages/events/"
    if properties:
        topic += urlencode(properties)
    return topic


def reported_topic(base_topic, device_id, request_id) -> str:
    return f"{base_topic}/{device_id}/twin/PATCH/properties/reported/?$rid={request_id}"


def desired_topic(base_topic, device_id) -> str:
    return f"{base_topic}/{device_id}/twin/PATCH/properties/desired/#"


def trust_ca_certificate(client, ca_certs):
    """
    Trust a root CA file for the broker connection.
    Must run before connect().
    """
    ca_path = Path(ca_certs)

    if not ca_path.exists():
        raise FileNotFoundError(f"CA certificate not found: {ca_certs}")

    logger.info("Using CA certificate: %s", ca_path)
    client.tls_set(ca_certs=str(ca_path))


class MQTTPublisher:
    """
    Device-to-cloud MQTT publisher.

    Responsibility:
    - Deliver serialized telemetry messages
    - Application properties travel in the topic
    - Content type / encoding travel as $.ct / $.ce
    - Reported properties for the device twin
    - NO simulation logic
    """

    def __init__(
        self,
        broker,
        port,
        base_topic="devices",
        keepalive=60,
        client=None,
        ca_certs=None,
    ):
        self.base_topic = base_topic
        self._request_ids = itertools.count(1)

        owns_client = client is None
        if owns_client:
            client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)

        if ca_certs:
            trust_ca_certificate(client, ca_certs)

        if owns_client:
            client.connect(broker, port, keepalive=keepalive)
            client.loop_start()
            logger.info("Connected to %s:%s", broker, port)

        self.client = client

    # =========================================================
    # INTERNAL
    # =========================================================
    def _publish(self, topic, payload, qos=1, retain=False):
        return self.client.publish(
            topic,
            payload,
            qos=qos,
            retain=retain,
        )

    # =========================================================
    # PUBLIC API
    # =========================================================
    def send_message(self, device_id, message, qos=1):
        properties = dict(message.properties)
        properties["$.ct"] = message.content_type
        properties["$.ce"] = message.content_encoding

        topic = event_topic(self.base_topic, device_id, properties)
        logger.debug("TX %s %s", topic, message.to_json())
        return self._publish(topic, message.encode(), qos=qos)

    # =========================================================
    # DEVICE TWIN
    # =========================================================
    def report_properties(self, device_id, reported: dict, qos=1):
        topic = reported_topic(self.base_topic, device_id, next(self._request_ids))
        logger.info("Reported twin properties: %s", json.dumps(reported))
        return self._publish(topic, json.dumps(reported), qos=qos)

    def on_desired_properties(self, device_id, handler):
        """
        handler(desired: dict) for every desired-properties patch.
        """
        topic = desired_topic(self.base_topic, device_id)

        def on_message(client, userdata, msg):
            try:
                handler(json.loads(msg.payload.decode("utf-8")))
            except Exception:
                logger.exception("Desired properties error on %s", msg.topic)

        self.client.message_callback_add(topic, on_message)
        self.client.subscribe(topic)

    # =========================================================
    # SHUTDOWN
    # =========================================================
    def stop(self):
        self.client.loop_stop()
        self.client.disconnect()
