"""Settings file loading."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

DEFAULT_SETTINGS_PATH = "settings.yaml"
SETTINGS_ENV_VAR = "SESSIONPOOL_SETTINGS"


class SettingsError(Exception):
    """Settings file is missing or invalid."""


@dataclass
class Settings:
    log_filename: str = ""
    http_addr: str = ":8080"
    centrifugo_url: str = ""
    report_interval: float = 60.0  # seconds

    def bind(self) -> Tuple[str, int]:
        """Split ``http_addr`` ("[host]:port") into host and port."""
        host, sep, port = self.http_addr.rpartition(":")
        if not sep:
            host, port = "", self.http_addr
        try:
            return host or "0.0.0.0", int(port)
        except ValueError:
            raise SettingsError(f"Invalid http-addr: {self.http_addr!r}")


def get_settings_path(custom_path: Optional[Union[str, Path]] = None) -> Path:
    if custom_path is not None:
        return Path(custom_path)
    return Path(os.environ.get(SETTINGS_ENV_VAR, DEFAULT_SETTINGS_PATH))


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from a YAML file.

    Raises:
        SettingsError: if the file can't be read or parsed.
    """
    settings_path = get_settings_path(path)
    try:
        content = settings_path.read_text()
    except OSError as e:
        raise SettingsError(f"error reading settings file: {e}") from e

    try:
        data: Dict[str, Any] = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise SettingsError(f"error parsing settings file: {e}") from e

    if not isinstance(data, dict):
        raise SettingsError("error parsing settings file: expected a mapping")

    try:
        report_interval = float(data.get("report-interval", Settings.report_interval))
    except (TypeError, ValueError) as e:
        raise SettingsError(f"Invalid report-interval: {e}") from e

    return Settings(
        log_filename=data.get("log-filename") or "",
        http_addr=str(data.get("http-addr") or Settings.http_addr),
        centrifugo_url=data.get("centrifugo-url") or "",
        report_interval=report_interval,
    )
