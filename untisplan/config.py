"""
Configuration from the environment.

Values are read from a .env file (if present) and the process environment:

    UNTIS_SERVER   e.g. nessa.webuntis.com
    UNTIS_SCHOOL   school name as used in the WebUntis login URL
    UNTIS_SESSION  JSESSIONID of an existing session (sent as cookie)
    UNTIS_TIMEOUT  request timeout in seconds (optional, no timeout if unset)
    UNTIS_CACHE    path of the period cache
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from untisplan.rpc import url_for
from untisplan.storage import default_cache_path


@dataclass(frozen=True)
class Config:
    server: Optional[str] = None
    school: Optional[str] = None
    session: Optional[str] = None
    timeout: Optional[float] = None
    cache_path: Path = field(default_factory=default_cache_path)

    def require_server(self) -> None:
        if not self.server or not self.school:
            raise ValueError("UNTIS_SERVER and UNTIS_SCHOOL must be set (environment or .env)")

    @property
    def url(self) -> str:
        self.require_server()
        return url_for(self.server, self.school)

    @property
    def cookies(self) -> Dict[str, str]:
        return {"JSESSIONID": self.session} if self.session else {}


def _optional(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


def load_config(env_file: str | Path | None = None) -> Config:
    """
    Load configuration. Existing environment variables win over the .env file.
    """
    if env_file is not None:
        load_dotenv(env_file)
    else:
        load_dotenv()

    timeout_raw = _optional("UNTIS_TIMEOUT")
    try:
        timeout = float(timeout_raw) if timeout_raw else None
    except ValueError:
        raise ValueError(f"UNTIS_TIMEOUT must be a number, got {timeout_raw!r}") from None

    cache_raw = _optional("UNTIS_CACHE")

    return Config(
        server=_optional("UNTIS_SERVER"),
        school=_optional("UNTIS_SCHOOL"),
        session=_optional("UNTIS_SESSION"),
        timeout=timeout,
        cache_path=Path(cache_raw) if cache_raw else default_cache_path(),
    )
