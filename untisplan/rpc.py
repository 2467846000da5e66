"""
JSON-RPC 2.0 transport for the WebUntis API.

One RPCClient keeps the session cookies of one WebUntis session:
- cookies set by a response are stored and sent with every later request
- a lock serializes round trips, so cookie reads and writes never interleave
- there is no retry; a non-200 status or an RPC error ends the call
"""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from untisplan.errors import HTTPStatusError, RPCError
from untisplan.timeformat import TimeUnits

log = logging.getLogger(__name__)


def url_for(server: str, school: str) -> str:
    """
    Build the JSON-RPC endpoint, e.g.
        url_for("nessa.webuntis.com", "demo") ->
        https://nessa.webuntis.com/WebUntis/jsonrpc.do?school=demo
    """
    server = server.strip().rstrip("/")
    if not server.startswith(("http://", "https://")):
        server = f"https://{server}"
    return f"{server}/WebUntis/jsonrpc.do?school={quote(school.strip())}"


def _request_id() -> str:
    return f"{int(time.time() * 1000) % 1_000_000}:{random.randrange(1_000_000)}"


class RPCClient:
    def __init__(
        self,
        url: str,
        cookies: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._cookies: Dict[str, str] = dict(cookies or {})
        self._lock = threading.Lock()

    @property
    def cookies(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._cookies)

    def _cookie_header(self) -> str:
        return ";".join(f"{k}={v}" for k, v in self._cookies.items())

    def request(self, method: str, params: Any = None) -> Any:
        """
        Call a remote method and return its `result`.

        Raises HTTPStatusError for a non-200 response and RPCError if the
        response carries an error object.
        """
        payload: Dict[str, Any] = {"jsonrpc": "2.0", "id": _request_id(), "method": method}
        if params is not None:
            payload["params"] = params

        with self._lock:
            headers = {"Content-Type": "application/json"}
            cookie = self._cookie_header()
            if cookie:
                headers["Cookie"] = cookie

            kwargs: Dict[str, Any] = {"json": payload, "headers": headers}
            if self.timeout is not None:
                kwargs["timeout"] = self.timeout

            t0 = time.monotonic()
            resp = requests.post(self.url, **kwargs)
            log.debug("%s took %d ms", method, (time.monotonic() - t0) * TimeUnits.SECOND)

            if resp.status_code != 200:
                raise HTTPStatusError(200, resp.status_code, resp.reason or "")

            body = resp.json()
            error = body.get("error")
            if error:
                raise RPCError(error.get("code", 0), error.get("message", ""))

            for name, value in resp.cookies.items():
                self._cookies[name] = value

        return body.get("result")
