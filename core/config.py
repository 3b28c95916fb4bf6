"""
Pydantic-based configuration for a single scan run.

Defaults are exposed via environment variables (RSCAN_*) so unattended runs
can change them without flags. The validated ScanConfig is an immutable value
handed to the coordinator; nothing reads process state after that.
"""

from functools import lru_cache
from typing import Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import (
    ConfigurationError,
    InvalidHost,
    InvalidRange,
    InvalidThreadCount,
    InvalidTimeout,
)

MIN_PORT = 0
MAX_PORT = 65535

# largest wait the socket layer accepts: poll() takes a signed 32-bit millisecond count
MAX_TIMEOUT_MS = 2**31 - 1

_HOST_PUNCTUATION = frozenset("._:-%")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RSCAN_", case_sensitive=False, env_file=".env")

    default_threads: int = Field(1, ge=1)
    default_start_port: int = Field(MIN_PORT, ge=MIN_PORT, le=MAX_PORT)
    default_end_port: int = Field(MAX_PORT, ge=MIN_PORT, le=MAX_PORT)
    default_timeout_ms: int = Field(250, ge=1, le=MAX_TIMEOUT_MS)

    log_level: str = Field("WARNING")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("log_level must be a standard logging level name")
        return v


@lru_cache()
def get_settings() -> Settings:
    try:
        return Settings()
    except ValidationError as exc:
        raise ConfigurationError(f"invalid RSCAN_* environment settings: {exc}") from exc


class ScanConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    host: str
    start_port: int = Field(ge=MIN_PORT, le=MAX_PORT)
    end_port: int = Field(ge=MIN_PORT, le=MAX_PORT)
    threads: int = Field(ge=1)
    timeout_ms: int = Field(ge=1, le=MAX_TIMEOUT_MS)
    suppress_closed: bool = False
    sort: bool = True
    interactive: bool = False

    @property
    def total_ports(self) -> int:
        return self.end_port - self.start_port + 1

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0


def _parse_int(value: Union[int, str], what: str, error_cls: Type[ConfigurationError]) -> int:
    if isinstance(value, bool):
        raise error_cls(f"{what} is not a valid integer!")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    digits = text[1:] if text.startswith("-") else text
    if not (digits.isascii() and digits.isdigit()):
        raise error_cls(f"{what} is not a valid integer!")
    return int(text)


def validate_host(host: Optional[str]) -> str:
    host = (host or "").strip()
    if not host:
        raise InvalidHost("Host cannot be empty!")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    valid = all(ch.isalnum() or ch in _HOST_PUNCTUATION for ch in host)
    if not host or not valid or ".." in host or host.startswith(("-", ".")):
        raise InvalidHost(f"Host '{host}' is not a valid host name or address!")
    return host


def load_config(
    host: Optional[str],
    start_port: Union[int, str, None] = None,
    end_port: Union[int, str, None] = None,
    threads: Union[int, str, None] = None,
    timeout_ms: Union[int, str, None] = None,
    suppress_closed: bool = False,
    sort: bool = True,
    interactive: bool = False,
) -> ScanConfig:
    """
    Validate raw scan parameters and build a ScanConfig.

    Values left as None take the Settings defaults. Every failure surfaces as a
    ConfigurationError subclass; nothing here touches the network.
    """
    s = get_settings()
    host = validate_host(host)

    start = s.default_start_port if start_port is None else _parse_int(start_port, "Start port", InvalidRange)
    end = s.default_end_port if end_port is None else _parse_int(end_port, "End port", InvalidRange)
    for name, port in (("Start port", start), ("End port", end)):
        if port < MIN_PORT or port > MAX_PORT:
            raise InvalidRange(f"{name} {port} is not a valid port number!")
    if end < start:
        raise InvalidRange("End port cannot be smaller than start port!")

    thread_count = s.default_threads if threads is None else _parse_int(threads, "Threads", InvalidThreadCount)
    if thread_count < 1:
        raise InvalidThreadCount("Threads cannot be smaller than 1!")

    timeout = s.default_timeout_ms if timeout_ms is None else _parse_int(timeout_ms, "Timeout", InvalidTimeout)
    if timeout < 1:
        raise InvalidTimeout("Timeout cannot be smaller than 1!")
    if timeout > MAX_TIMEOUT_MS:
        raise InvalidTimeout(f"Timeout cannot be larger than {MAX_TIMEOUT_MS}!")

    try:
        return ScanConfig(
            host=host,
            start_port=start,
            end_port=end,
            threads=thread_count,
            timeout_ms=timeout,
            suppress_closed=suppress_closed,
            sort=sort,
            interactive=interactive,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"invalid scan configuration: {exc}") from exc
