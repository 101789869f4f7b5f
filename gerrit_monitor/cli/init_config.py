"""Write a starter gerrit-monitor.yaml."""

from __future__ import annotations

from pathlib import Path

from ..instances import InstanceConfig

HEADER = """# gerrit-monitor.yaml - Gerrit instances to watch
# Generated by: gerrit-monitor init
#
# Each instance needs a host (scheme + domain). Set enabled: false to skip one.

"""


def init_config(output: Path, force: bool = False) -> str:
    """Write the default instance config to ``output``.

    Returns:
        YAML config string
    """
    if output.exists() and not force:
        raise FileExistsError(f"{output} already exists (use --force to overwrite)")

    content = HEADER + InstanceConfig.default().to_yaml()

    print(f"Writing config to {output}")
    with open(output, "w") as f:
        f.write(content)
    return content
