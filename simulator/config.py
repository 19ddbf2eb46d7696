# simulator/config.py

SIM_CONFIG = {
    # ======================
    # Device
    # ======================
    "device": {
        "device_id": "vibration-sensor-01",
        "interval_sec": 2,
        "seed": None,
    },

    # ======================
    # MQTT
    # ======================
    "mqtt": {
        "broker": "localhost",
        "port": 1883,
        "keepalive": 60,
        "base_topic": "devices",
        "qos": 1,
        "ca_certs": None,             # root CA file; enables TLS
    },

    # ======================
    # Message properties
    # ======================
    "alerts": {
        "belt_stopped_sec": 5,        # beltAlert=true above this
        "temperature_c": 30,          # temperatureAlert=true above this
    },

    # ======================
    # Operator console
    # ======================
    "console": {
        "history_window": 60,
    },

    "logging": {
        "level": "INFO",
        "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    },
}
