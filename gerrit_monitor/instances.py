"""Gerrit instance configuration.

Instances are listed in a YAML file::

    instances:
      - host: https://chromium-review.googlesource.com
        name: Chromium
        enabled: true

Hosts are reduced to their origin, so a trailing ``/`` (or any path) is
dropped. Some Gerrit servers fail on ``//`` in request paths.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config import GERRIT_MONITOR_CONFIG
from .models import GerritInstance

logger = logging.getLogger(__name__)

ORIGIN_RE = re.compile(r"^(https?://[^/]+)")

CONFIG_CANDIDATES = ["gerrit-monitor.yaml", ".gerrit-monitor.yaml", "gerrit-monitor.yml", ".gerrit-monitor.yml"]

DEFAULT_INSTANCES = [
    GerritInstance(host="https://chromium-review.googlesource.com", name="Chromium"),
]


def normalize_host(host: str) -> str | None:
    """Return the origin of ``host``, or None if it is not an http(s) URL."""
    match = ORIGIN_RE.match(host.strip())
    if match is None:
        return None
    return match.group(1)


@dataclass
class InstanceConfig:
    """The configured Gerrit instances."""

    instances: list[GerritInstance] = field(default_factory=list)

    @classmethod
    def load(cls, path: Path | str | None = None) -> InstanceConfig:
        """Load config from YAML file or return defaults."""
        if path is None:
            path = GERRIT_MONITOR_CONFIG
        if path is None:
            for candidate in CONFIG_CANDIDATES:
                if Path(candidate).exists():
                    path = candidate
                    break

        if path is None or not Path(path).exists():
            return cls.default()

        with open(path) as f:
            data = yaml.safe_load(f)

        logger.info(f"Loaded instance config from {path}")
        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InstanceConfig:
        """Create config from dictionary (e.g., parsed YAML)."""
        instances = []
        for item in data.get("instances") or []:
            if not isinstance(item, dict):
                logger.warning(f"Ignoring malformed instance entry: {item!r}")
                continue
            host = normalize_host(item.get("host") or "")
            if host is None:
                logger.warning(f"Ignoring instance with invalid host: {item.get('host')!r}")
                continue
            instances.append(
                GerritInstance(
                    host=host,
                    name=item.get("name") or host,
                    enabled=item.get("enabled", True),
                )
            )
        return cls(instances=instances)

    @classmethod
    def default(cls) -> InstanceConfig:
        return cls(instances=[instance.model_copy() for instance in DEFAULT_INSTANCES])

    def enabled_instances(self) -> list[GerritInstance]:
        return [instance for instance in self.instances if instance.enabled]

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        data = {"instances": [instance.model_dump() for instance in self.instances]}
        return yaml.dump(data, default_flow_style=False, sort_keys=False)
