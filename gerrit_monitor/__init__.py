"""gerrit-monitor: see which Gerrit changelists need your attention."""

__version__ = "0.1.0"
