import json


class TelemetryMessage:
    """
    Device-to-cloud message.
    JSON body + string application properties (used for routing).
    """

    content_type = "application/json"
    content_encoding = "utf-8"

    def __init__(self, body: dict, properties: dict = None):
        self.body = body
        self.properties = dict(properties or {})

    def to_json(self) -> str:
        return json.dumps(self.body)

    def encode(self) -> bytes:
        return self.to_json().encode(self.content_encoding)

    def __repr__(self):
        return f"TelemetryMessage(body={self.body!r}, properties={self.properties!r})"


def _flag(condition) -> str:
    return "true" if condition else "false"


# =========================================================
# CONVEYOR BELT
# =========================================================
def build_vibration_telemetry(belt, vibration, stopped_alert_seconds=5):
    return TelemetryMessage(
        {"vibration": vibration},
        {
            "sensorID": "VSTel",
            "beltAlert": _flag(belt.stopped_seconds > stopped_alert_seconds),
        },
    )


def build_vibration_log(belt, vibration, stopped_alert_seconds=5):
    return TelemetryMessage(
        {
            "vibration": round(vibration, 2),
            "packages": belt.package_count,
            "speed": belt.speed.value,
            "temp": round(belt.temperature, 2),
        },
        {
            "sensorID": "VSLog",
            "beltAlert": _flag(belt.stopped_seconds > stopped_alert_seconds),
        },
    )


# =========================================================
# ENVIRONMENT
# =========================================================
def build_environment_telemetry(temperature, humidity, temperature_alert=None):
    properties = {}

    if temperature_alert is not None:
        properties["temperatureAlert"] = _flag(temperature > temperature_alert)

    return TelemetryMessage(
        {"temperature": temperature, "humidity": humidity},
        properties,
    )


def build_container_telemetry(temperature, humidity, pressure, location, temperature_alert=30):
    latitude, longitude = location

    return TelemetryMessage(
        {
            "temperature": temperature,
            "humidity": humidity,
            "pressure": pressure,
            "latitude": latitude,
            "longitude": longitude,
        },
        {"temperatureAlert": _flag(temperature > temperature_alert)},
    )
