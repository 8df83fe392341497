"""Tests for the output module (point builder and sinks)."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import orjson
import pytest

from unifi_poller.config import InfluxConfig
from unifi_poller.output import InfluxPointBuilder, InfluxSink, StdoutSink


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestInfluxPointBuilder:
    """Tests for :class:`InfluxPointBuilder`."""

    def test_builds_point_dict(self) -> None:
        point = InfluxPointBuilder().build(
            "usw_ports", {"name": "Port 1"}, {"rx_bytes": 10.0, "up": True}, NOW
        )
        assert point == {
            "measurement": "usw_ports",
            "tags": {"name": "Port 1"},
            "fields": {"rx_bytes": 10.0, "up": True},
            "time": NOW,
        }

    @pytest.mark.parametrize(
        ("name", "tags", "fields"),
        [
            ("", {}, {"a": 1.0}),
            ("usg", {}, {}),
            ("usg", {"": "x"}, {"a": 1.0}),
            ("usg", {"up": 1.0}, {"a": 1.0}),
            ("usg", {}, {"": 1.0}),
            ("usg", {}, {"a": None}),
            ("usg", {}, {"a": [1, 2]}),
            ("usg", {}, {"uptime": float("nan")}),
            ("usg", {}, {"uptime": float("inf")}),
            ("usg", {}, {"uptime": float("-inf")}),
        ],
    )
    def test_rejects_invalid_series(self, name, tags, fields) -> None:
        with pytest.raises(ValueError):
            InfluxPointBuilder().build(name, tags, fields, NOW)

    def test_large_finite_float_is_accepted(self) -> None:
        point = InfluxPointBuilder().build("usg", {}, {"bytes": 1.7e308}, NOW)
        assert point["fields"] == {"bytes": 1.7e308}


class TestStdoutSink:
    """Tests for :class:`StdoutSink`."""

    def test_writes_one_line_per_point(self) -> None:
        points = [
            {"measurement": "usg", "tags": {}, "fields": {"a": 1.0}, "time": NOW},
            {"measurement": "usw", "tags": {}, "fields": {"b": 2.0}, "time": NOW},
        ]
        mock_stdout = MagicMock()
        with patch("unifi_poller.output.sys") as mock_sys:
            mock_sys.stdout = mock_stdout
            count = StdoutSink().write(points)

        assert count == 2
        writes = [c.args[0] for c in mock_stdout.buffer.write.call_args_list]
        assert len(writes) == 2
        assert all(w.endswith(b"\n") for w in writes)
        assert orjson.loads(writes[1])["measurement"] == "usw"
        mock_stdout.buffer.flush.assert_called_once()


class TestInfluxSink:
    """Tests for :class:`InfluxSink`."""

    def test_write_points(self) -> None:
        with patch("unifi_poller.output.InfluxDBClient") as client_cls:
            sink = InfluxSink(InfluxConfig(database="metrics"))
            assert sink.write(iter([{"measurement": "usg"}])) == 1

        client_cls.assert_called_once()
        assert client_cls.call_args.kwargs["database"] == "metrics"
        client_cls.return_value.write_points.assert_called_once_with([{"measurement": "usg"}])

    def test_empty_batch_is_not_sent(self) -> None:
        with patch("unifi_poller.output.InfluxDBClient") as client_cls:
            sink = InfluxSink(InfluxConfig())
            assert sink.write([]) == 0
            sink.close()

        client_cls.return_value.write_points.assert_not_called()
        client_cls.return_value.close.assert_called_once()
