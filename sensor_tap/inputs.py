"""Input registry and the accumulator that collectors write into."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from sensor_tap.config import AppConfig

SCHEMA_NAME = "sensor-tap"
SCHEMA_VERSION = 1

FieldValue = float | str


@dataclass(frozen=True)
class Metric:
    measurement: str
    fields: dict[str, FieldValue]
    tags: dict[str, str]
    ts: str


@dataclass
class Accumulator:
    metrics: list[Metric] = field(default_factory=list)

    def add_fields(
        self,
        measurement: str,
        fields: dict[str, FieldValue],
        tags: dict[str, str],
    ) -> None:
        ts = datetime.now(timezone.utc).isoformat()
        self.metrics.append(Metric(measurement, dict(fields), dict(tags), ts))

    def payload(self, host: str) -> dict[str, Any]:
        return {
            "schema": {"name": SCHEMA_NAME, "version": SCHEMA_VERSION},
            "ts": datetime.now(timezone.utc).isoformat(),
            "host": host,
            "metrics": {
                metric.measurement: {
                    "ts": metric.ts,
                    "tags": metric.tags,
                    "fields": metric.fields,
                }
                for metric in self.metrics
            },
        }


class Input(Protocol):
    description: str
    sample_config: str

    def gather(self, acc: Accumulator) -> None: ...


class InputFactory(Protocol):
    description: str
    sample_config: str

    def from_config(self, config: AppConfig) -> Input: ...


_registry: dict[str, InputFactory] = {}
logger = logging.getLogger(__name__)


def add(name: str, factory: InputFactory) -> None:
    logger.debug("Registering input %s", name)
    _registry[name] = factory


def registered() -> dict[str, InputFactory]:
    return dict(_registry)
