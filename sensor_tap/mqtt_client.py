from __future__ import annotations

import json
import logging
import ssl
from typing import Any

import paho.mqtt.client as mqtt

from sensor_tap.config import MqttConfig

FIELD_UNITS = {
    "co2": ("ppm", "carbon_dioxide"),
    "voltage_now": ("V", "voltage"),
    "capacity": ("%", "battery"),
}


class MqttPublisher:
    def __init__(self, config: MqttConfig) -> None:
        self.config = config
        self.client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=config.client_id,
            protocol=mqtt.MQTTv311,
        )
        self.logger = logging.getLogger(self.__class__.__name__)
        self._connected = False

        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect

        if config.username:
            self.client.username_pw_set(config.username, config.password)
        if config.tls_enabled:
            self.client.tls_set(
                ca_certs=config.ca_cert,
                cert_reqs=ssl.CERT_REQUIRED,
            )

        self.client.will_set(
            self._availability_topic,
            payload="offline",
            qos=1,
            retain=True,
        )
        self.client.reconnect_delay_set(min_delay=1, max_delay=120)

    @property
    def _availability_topic(self) -> str:
        return f"{self.config.base_topic}/status"

    @property
    def connected(self) -> bool:
        return self._connected

    def _on_connect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        if not reason_code.is_failure:
            self._connected = True
            self.logger.info(
                "Connected to MQTT broker %s:%s", self.config.host, self.config.port
            )
            self.client.publish(
                self._availability_topic,
                payload="online",
                qos=1,
                retain=True,
            )
        else:
            self._connected = False
            self.logger.error("Failed to connect to MQTT broker: %s", reason_code)

    def _on_disconnect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        self._connected = False
        if not reason_code.is_failure:
            self.logger.info("Disconnected from MQTT broker (clean)")
        else:
            self.logger.warning(
                "Unexpectedly disconnected from MQTT broker: %s. "
                "Will attempt to reconnect.",
                reason_code,
            )

    def connect(self) -> None:
        self.logger.info(
            "Connecting to MQTT broker %s:%s", self.config.host, self.config.port
        )
        self.client.connect(
            self.config.host,
            self.config.port,
            keepalive=self.config.keepalive,
        )
        # Background network loop handles reconnection
        self.client.loop_start()

    def disconnect(self) -> None:
        if self._connected:
            self.client.publish(
                self._availability_topic,
                payload="offline",
                qos=1,
                retain=True,
            )
        self.client.loop_stop()
        self.client.disconnect()
        self.logger.info("Disconnected from MQTT broker")

    def publish_status(self, status: str) -> bool:
        """Publish a custom status to the availability topic.

        Args:
            status: Status string (e.g., "online", "offline", "sleeping")

        Returns:
            True if publish succeeded, False otherwise.
        """
        self.logger.info("Publishing status '%s' to %s", status, self._availability_topic)
        result = self.client.publish(
            self._availability_topic,
            payload=status,
            qos=1,
            retain=True,
        )
        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            self.logger.error("Failed to publish status, error code: %s", result.rc)
            return False
        return True

    def publish(self, payload: str) -> bool:
        if not self._connected:
            self.logger.warning(
                "Not connected to MQTT broker, message may be queued"
            )
        self.logger.debug("Publishing sensor payload to %s", self.config.base_topic)
        result = self.client.publish(
            self.config.base_topic,
            payload=payload,
            qos=self.config.qos,
            retain=self.config.retain,
        )
        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            self.logger.error("Failed to publish message, error code: %s", result.rc)
            return False
        return True

    def discovery_messages(self, payload: dict[str, Any]) -> list[tuple[str, dict[str, Any]]]:
        """Home Assistant discovery topics and configs, one per gathered field."""
        device_id = self.config.client_id
        host = payload.get("host", device_id)
        device = {
            "identifiers": [device_id],
            "name": host,
            "model": "sensor-tap",
        }
        messages = []
        for measurement, metric in payload.get("metrics", {}).items():
            for field_name in metric.get("fields", {}):
                object_id = f"{measurement}_{field_name}"
                config: dict[str, Any] = {
                    "name": f"{host} {measurement} {field_name}",
                    "unique_id": f"{device_id}_{object_id}",
                    "state_topic": self.config.base_topic,
                    "value_template": (
                        f"{{{{ value_json.metrics.{measurement}.fields.{field_name} }}}}"
                    ),
                    "availability_topic": self._availability_topic,
                    "payload_available": "online",
                    "payload_not_available": "offline",
                    "device": device,
                }
                if field_name in FIELD_UNITS:
                    unit, device_class = FIELD_UNITS[field_name]
                    config["unit_of_measurement"] = unit
                    config["device_class"] = device_class
                    config["state_class"] = "measurement"
                topic = f"{self.config.discovery_topic}/sensor/{device_id}/{object_id}/config"
                messages.append((topic, config))
        return messages

    def publish_discovery(self, payload: dict[str, Any]) -> None:
        for topic, config in self.discovery_messages(payload):
            self.logger.debug("Publishing Home Assistant discovery to %s", topic)
            self.client.publish(
                topic,
                payload=json.dumps(config),
                qos=self.config.qos,
                retain=True,
            )
