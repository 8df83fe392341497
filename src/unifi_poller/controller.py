"""Authenticated HTTP session against a UniFi controller.

Login posts the credentials to ``/api/login``; the controller answers with a
session cookie that the underlying :class:`requests.Session` replays on every
later request.  Requests are never retried; a failed request fails the
polling cycle.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import orjson
import requests
import urllib3

from unifi_poller.config import ControllerConfig

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/login"
DEVICE_PATH = "/api/s/{site}/stat/device"


class AuthenticationError(Exception):
    """The controller rejected the login."""


class ControllerError(Exception):
    """A controller request failed at the transport or HTTP level."""


class Controller:
    """Cookie-authenticated requests against one controller.

    Parameters
    ----------
    config:
        Controller URL, credentials, and TLS settings.
    session:
        Injected :class:`requests.Session`; a new one is created when omitted.
    """

    def __init__(
        self,
        config: ControllerConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._base_url = config.url.rstrip("/")
        self._user = config.user
        self._password = config.password
        self._timeout = config.timeout_seconds
        self._session = session or requests.Session()
        self._session.verify = config.verify_ssl
        self._session.headers["Accept"] = "application/json"
        if not config.verify_ssl:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    def login(self) -> None:
        """Authenticate and keep the session cookie.

        Raises
        ------
        AuthenticationError
            If the request fails or the controller answers with a non-200.
        """
        url = self._base_url + LOGIN_PATH
        try:
            resp = self._session.post(
                url,
                data=orjson.dumps({"username": self._user, "password": self._password}),
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise AuthenticationError(f"login request to {url} failed: {exc}") from exc

        if resp.status_code != 200:
            raise AuthenticationError(
                f"authentication failed ({self._user}): {url} "
                f"(status: {resp.status_code}/{resp.reason})"
            )
        logger.info("Logged in to %s as %s", self._base_url, self._user)

    def request(self, path: str, params: Optional[dict[str, Any]] = None) -> bytes:
        """GET *path*, or POST *params* as JSON when given; return the raw body.

        Raises
        ------
        ControllerError
            On a transport failure or a non-2xx status.
        """
        url = self._base_url + path
        try:
            if params:
                resp = self._session.post(
                    url,
                    data=orjson.dumps(params),
                    headers={"Content-Type": "application/json"},
                    timeout=self._timeout,
                )
            else:
                resp = self._session.get(url, timeout=self._timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise ControllerError(f"{url}: {exc}") from exc
        return resp.content

    def devices(self, site: str) -> bytes:
        """Raw ``stat/device`` response for *site*."""
        return self.request(DEVICE_PATH.format(site=site))

    def close(self) -> None:
        self._session.close()
