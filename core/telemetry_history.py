from collections import deque

import numpy as np


class TelemetryHistory:
    """
    Telemetry History
    =================
    - Per device + field buffer
    - Fixed window size
    - Non-numeric values are ignored
    """

    def __init__(self, window_size=60):
        self.window_size = window_size
        self.buffers = {}

    # =========================================================
    # INTERNAL
    # =========================================================
    def _key(self, device_id, field):
        return f"{device_id}:{field}"

    # =========================================================
    # PUBLIC API
    # =========================================================
    def append(self, device_id, payload: dict):
        """
        Record every numeric field of a telemetry payload.
        """

        if not payload:
            return

        for field, value in payload.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue

            key = self._key(device_id, field)

            if key not in self.buffers:
                self.buffers[key] = deque(maxlen=self.window_size)

            self.buffers[key].append(float(value))

    def get_window(self, device_id, field):
        key = self._key(device_id, field)

        if key not in self.buffers:
            return None

        return list(self.buffers[key])

    def summary(self, device_id, field):
        window = self.get_window(device_id, field)

        if not window:
            return None

        values = np.asarray(window, dtype=float)

        return {
            "count": int(values.size),
            "mean": float(np.mean(values)),
            "rms": float(np.sqrt(np.mean(values ** 2))),
            "peak": float(np.max(np.abs(values))),
        }

    def clear(self, device_id, field):
        key = self._key(device_id, field)
        if key in self.buffers:
            self.buffers[key].clear()
