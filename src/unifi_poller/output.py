"""Point builders and sinks for projected series.

InfluxPointBuilder
    Turns a series into the point dict accepted by
    ``InfluxDBClient.write_points`` and rejects anything InfluxDB would.

StdoutSink
    Writes one NDJSON line per point to ``sys.stdout.buffer``.  Useful for
    debugging and ``--once`` runs.

InfluxSink
    Writes points to an InfluxDB 1.x database.
"""

from __future__ import annotations

import logging
import math
import sys
from datetime import datetime
from typing import Any, Iterable, Mapping

import orjson
from influxdb import InfluxDBClient

from unifi_poller.config import InfluxConfig

logger = logging.getLogger(__name__)

_FIELD_TYPES = (bool, int, float, str)


class InfluxPointBuilder:
    """Build InfluxDB point dicts; satisfies :class:`~unifi_poller.points.PointBuilder`."""

    def build(
        self,
        name: str,
        tags: Mapping[str, str],
        fields: Mapping[str, Any],
        time: datetime,
    ) -> dict[str, Any]:
        """Validate and return ``{"measurement", "tags", "fields", "time"}``.

        Raises
        ------
        ValueError
            On an empty measurement name, an empty tag or field key, a
            non-string tag value, an empty field set, a field value that is
            not a bool, int, float or str, or a NaN or infinite float.
        """
        if not name:
            raise ValueError("measurement name is empty")
        if not fields:
            raise ValueError(f"{name}: a point needs at least one field")
        for key, value in tags.items():
            if not key:
                raise ValueError(f"{name}: empty tag key")
            if not isinstance(value, str):
                raise ValueError(f"{name}: tag {key!r} is {type(value).__name__}, not str")
        for key, value in fields.items():
            if not key:
                raise ValueError(f"{name}: empty field key")
            if not isinstance(value, _FIELD_TYPES):
                raise ValueError(
                    f"{name}: field {key!r} has unsupported type {type(value).__name__}"
                )
            if isinstance(value, float) and not math.isfinite(value):
                raise ValueError(f"{name}: field {key!r} is {value}, not a finite number")
        return {
            "measurement": name,
            "tags": dict(tags),
            "fields": dict(fields),
            "time": time,
        }


class StdoutSink:
    """Write points as NDJSON to stdout."""

    def write(self, points: Iterable[dict[str, Any]]) -> int:
        """Write *points*, returning how many were written.

        Raises
        ------
        BrokenPipeError
            If the stdout consumer has gone away.
        """
        count = 0
        try:
            for point in points:
                sys.stdout.buffer.write(
                    orjson.dumps(point, option=orjson.OPT_APPEND_NEWLINE)
                )
                count += 1
            sys.stdout.buffer.flush()
        except BrokenPipeError:
            logger.warning("stdout broken, consumer likely exited")
            raise
        return count

    def close(self) -> None:
        """No-op for stdout."""


class InfluxSink:
    """Ship points to InfluxDB.

    Parameters
    ----------
    config:
        InfluxDB connection settings.
    """

    def __init__(self, config: InfluxConfig) -> None:
        self._database = config.database
        self._client = InfluxDBClient(
            host=config.host,
            port=config.port,
            username=config.username,
            password=config.password,
            database=config.database,
            ssl=config.ssl,
            verify_ssl=config.verify_ssl,
        )

    def write(self, points: Iterable[dict[str, Any]]) -> int:
        """Write *points* in one batch, returning how many were sent."""
        batch = list(points)
        if not batch:
            return 0
        self._client.write_points(batch)
        logger.debug("Wrote %d points to %s", len(batch), self._database)
        return len(batch)

    def close(self) -> None:
        self._client.close()
