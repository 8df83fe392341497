"""Click CLI for unifi-poller.

Entry point registered in ``pyproject.toml`` as ``unifi-poller``::

    unifi-poller                      # poll forever, write to InfluxDB
    unifi-poller -o stdout --once     # one cycle, NDJSON points on stdout
    unifi-poller --validate-config    # check the config file and exit
"""

from __future__ import annotations

import logging
import os
import signal
import threading
from datetime import datetime, timezone
from typing import Optional, Union

import click

from unifi_poller import __version__
from unifi_poller.config import AppConfig, load_config
from unifi_poller.controller import AuthenticationError, Controller, ControllerError
from unifi_poller.decode import decode_devices
from unifi_poller.flex import DecodeError
from unifi_poller.logs import setup_logging
from unifi_poller.output import InfluxPointBuilder, InfluxSink, StdoutSink
from unifi_poller.points import PointProjector, ProjectionError

logger = logging.getLogger("unifi_poller")

DEFAULT_CONFIG = "/etc/unifi-poller/config.json"


@click.command()
@click.option("-c", "--config", "config_path", default=None, help="Config file path.")
@click.option("-o", "--output", "output_mode", type=click.Choice(["influx", "stdout"]),
              default=None, help="Where points go (default: from config).")
@click.option("--once", is_flag=True, help="Run a single polling cycle and exit.")
@click.option("--interval", type=click.IntRange(min=1), default=None,
              help="Seconds between polling cycles.")
@click.option("--log-level", default=None,
              type=click.Choice(["debug", "info", "warn", "error"]),
              help="Log verbosity.")
@click.option("--validate-config", "validate_only", is_flag=True,
              help="Validate config and exit.")
@click.option("--controller-password", default=None, help="Override controller password.")
@click.version_option(__version__)
def main(
    config_path: Optional[str],
    output_mode: Optional[str],
    once: bool,
    interval: Optional[int],
    log_level: Optional[str],
    validate_only: bool,
    controller_password: Optional[str],
) -> None:
    """unifi-poller: UniFi controller to InfluxDB metrics poller."""
    cfg_path = config_path or os.environ.get("UNIFI_POLLER_CONFIG", DEFAULT_CONFIG)

    overrides: dict[str, str] = {}
    if controller_password:
        overrides["UNIFI_PASSWORD"] = controller_password

    try:
        cfg = load_config(cfg_path, overrides=overrides)
    except Exception as exc:
        click.echo(f"Config error: {exc}", err=True)
        raise SystemExit(1) from exc

    if controller_password:
        cfg.controller.password = controller_password
    if output_mode:
        cfg.poller.output = output_mode
    if interval:
        cfg.poller.interval_seconds = interval

    setup_logging(
        log_level or os.environ.get("UNIFI_POLLER_LOG_LEVEL") or cfg.logging.level,
        cfg.secret_values(),
        cfg.logging.file,
    )

    if validate_only:
        click.echo("Configuration is valid.", err=True)
        raise SystemExit(0)

    logger.info(
        "Starting unifi-poller %s (controller=%s, output=%s, interval=%ds)",
        __version__,
        cfg.controller.url,
        cfg.poller.output,
        cfg.poller.interval_seconds,
    )

    try:
        run(cfg, once)
    except AuthenticationError as exc:
        logger.error("%s", exc)
        raise SystemExit(1) from exc


# ── polling loop ────────────────────────────────────────────────────


def run(cfg: AppConfig, once: bool = False) -> None:
    """Login, then poll every ``interval_seconds`` until signalled."""
    stop = threading.Event()

    def _handle_signal(signum: int, _frame: object) -> None:
        logger.info("Received signal %d, stopping after this cycle", signum)
        stop.set()

    previous = {sig: signal.signal(sig, _handle_signal) for sig in (signal.SIGTERM, signal.SIGINT)}

    controller = Controller(cfg.controller)
    projector = PointProjector(InfluxPointBuilder())
    sink: Union[StdoutSink, InfluxSink] = (
        StdoutSink() if cfg.poller.output == "stdout" else InfluxSink(cfg.influx)
    )

    cycles = 0
    try:
        controller.login()
        while not stop.is_set():
            try:
                count = poll_once(controller, projector, sink, cfg.controller.sites)
                logger.info("Cycle %d wrote %d points", cycles, count)
            except ControllerError as exc:
                logger.error("Cycle %d skipped, controller request failed: %s", cycles, exc)
                _relogin(controller)
            except DecodeError as exc:
                logger.error("Cycle %d skipped, undecodable payload: %s", cycles, exc)
            except BrokenPipeError:
                break
            except Exception:
                # sink failures: influxdb client and requests errors
                logger.exception("Cycle %d failed while writing points", cycles)

            cycles += 1
            if once:
                break
            stop.wait(cfg.poller.interval_seconds)
    finally:
        sink.close()
        controller.close()
        for sig, handler in previous.items():
            signal.signal(sig, handler)
        logger.info("Poller shut down after %d cycles", cycles)


def poll_once(
    controller: Controller,
    projector: PointProjector,
    sink: Union[StdoutSink, InfluxSink],
    sites: list[str],
    now: Optional[datetime] = None,
) -> int:
    """Fetch, decode, project, and write one cycle; return points written.

    Every site is fetched and decoded before anything is written, so a bad
    payload leaves the cycle with no output at all.

    Raises
    ------
    ControllerError
        A device request failed.
    DecodeError
        A device payload could not be decoded.
    """
    now = now or datetime.now(timezone.utc)
    devices = []
    for site in sites:
        devices.extend(decode_devices(controller.devices(site), site_name=site))

    points: list[dict] = []
    for udm in devices:
        try:
            points.extend(projector.points(udm, now))
        except ProjectionError as exc:
            logger.error(
                "Device %s (%s): %s: %s", udm.name, udm.mac, exc, exc.__cause__
            )
            points.extend(exc.points)

    return sink.write(points)


def _relogin(controller: Controller) -> None:
    try:
        controller.login()
    except AuthenticationError as exc:
        logger.error("Re-login failed: %s", exc)
