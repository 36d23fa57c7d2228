from __future__ import annotations

import argparse
import json
import logging
import socket
import time
from typing import Any

from sensor_tap import inputs
from sensor_tap.collector import create_inputs, gather_inputs
from sensor_tap.config import load_config
from sensor_tap.logging_utils import configure_logging, resolve_log_level
from sensor_tap.mqtt_client import MqttPublisher
from sensor_tap.schema import validate_payload


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sensor Tap CO2 and battery exporter")
    parser.add_argument(
        "--config",
        default="config/example.cfg",
        help="Path to CFG configuration file",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Enable debug logging (-v) or trace logging (-vv)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log payloads without publishing to MQTT",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Gather and publish a single payload, then exit",
    )
    parser.add_argument(
        "--dump-json",
        help="Write the JSON payload to a file (overwrites on each loop)",
    )
    parser.add_argument(
        "--publish-status",
        metavar="STATUS",
        help="Publish a status (e.g., 'sleeping', 'online') to the availability topic and exit.",
    )
    parser.add_argument(
        "--list-inputs",
        action="store_true",
        help="List inputs available on this host and exit",
    )
    parser.add_argument(
        "--sample-config",
        action="store_true",
        help="Print the sample configuration of every available input and exit",
    )
    return parser


def render_sample_config() -> str:
    blocks = []
    for name, factory in inputs.registered().items():
        blocks.append(f"# {name}: {factory.description}\n{factory.sample_config}")
    return "\n".join(blocks)


def run_cycle(sources: dict[str, inputs.Input], host: str) -> dict[str, Any]:
    acc, _ = gather_inputs(sources)
    return acc.payload(host)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    level = resolve_log_level(args.verbose, args.log_level)
    configure_logging(level)
    logger = logging.getLogger("sensor_tap")

    if args.list_inputs:
        for name in inputs.registered():
            print(name)
        return
    if args.sample_config:
        print(render_sample_config())
        return

    config = load_config(args.config)
    pretty_print = level <= logging.DEBUG

    if args.publish_status:
        publisher = MqttPublisher(config.mqtt)
        publisher.connect()
        # Wait briefly for connection to establish
        time.sleep(0.5)
        if publisher.connected:
            publisher.publish_status(args.publish_status)
            time.sleep(0.5)
        else:
            logger.error("Failed to connect to MQTT broker")
        publisher.disconnect()
        return

    sources = create_inputs(config)
    if not sources:
        logger.error("No inputs available on this host.")
        return
    host = socket.gethostname()
    publisher = None if args.dry_run else MqttPublisher(config.mqtt)
    if publisher is not None:
        publisher.connect()

    interval = max(1, config.publish.interval_s)
    logger.info("Sensor Tap started with inputs %s.", ", ".join(sources))
    discovered: set[str] = set()

    try:
        while True:
            payload = run_cycle(sources, host)
            schema_errors = validate_payload(payload)
            if schema_errors:
                logger.warning(
                    "Schema validation failed with %s errors.", len(schema_errors)
                )
                logger.debug("Schema errors: %s", schema_errors)
            else:
                logger.debug("Schema validation passed.")
            payload_json = json.dumps(payload, indent=2) if pretty_print else json.dumps(payload)
            if args.dump_json:
                with open(args.dump_json, "w", encoding="utf-8") as handle:
                    handle.write(payload_json)
            if args.dry_run:
                logger.info("Dry run enabled; skipping MQTT publish.")
                logger.debug("Payload: %s", payload_json)
            elif publisher is not None:
                # Announce each measurement the first time it reports
                new = set(payload["metrics"]) - discovered
                if new:
                    publisher.publish_discovery(
                        {**payload, "metrics": {m: payload["metrics"][m] for m in new}}
                    )
                    discovered |= new
                publisher.publish(payload_json)
            if args.once:
                logger.info("Single-run mode enabled; exiting after one payload.")
                break
            time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("Sensor Tap stopped.")
    finally:
        if publisher is not None:
            publisher.disconnect()


if __name__ == "__main__":
    main()
