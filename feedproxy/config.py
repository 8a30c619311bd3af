from __future__ import annotations
import os
from typing import Any, Optional, Protocol, Mapping


class ConfigProvider(Protocol):
    def get(self, key: str, default: Any = None, *, context: Optional[Mapping[str, Any]] = None) -> Any: ...
    def get_int(self, key: str, default: int = 0, *, context: Optional[Mapping[str, Any]] = None) -> int: ...


class EnvConfigProvider:
    """Service settings from the process environment.

    Only deployment knobs live here; the feed allowlist is compiled in.
    """

    def get(self, key: str, default: Any = None, *, context=None) -> Any:
        v = os.getenv(key)
        return default if v is None or v == "" else v

    def get_int(self, key: str, default: int = 0, *, context=None) -> int:
        try:
            return int(os.getenv(key, ""))
        except ValueError:
            return default


class InMemoryConfigProvider:
    def __init__(self, data: Optional[dict[str, Any]] = None) -> None:
        self.data = data or {}

    def get(self, key: str, default: Any = None, *, context=None) -> Any:
        return self.data.get(key, default)

    def get_int(self, key: str, default: int = 0, *, context=None) -> int:
        v = self.data.get(key, None)
        try:
            return int(v)
        except (TypeError, ValueError):
            return default


def log_level(provider: Optional[ConfigProvider] = None) -> str:
    return str((provider or EnvConfigProvider()).get("LOG_LEVEL", "INFO")).upper()


def bind_address(provider: Optional[ConfigProvider] = None) -> tuple[str, int]:
    p = provider or EnvConfigProvider()
    return str(p.get("HOST", "0.0.0.0")), p.get_int("PORT", 8787)
