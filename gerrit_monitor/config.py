"""Configuration for talking to Gerrit instances."""

import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

# HTTP credentials (optional). When set, requests use the authenticated /a/ prefix.
GERRIT_USERNAME = os.environ.get("GERRIT_USERNAME")
GERRIT_PASSWORD = os.environ.get("GERRIT_PASSWORD")

# Instance list override (default: gerrit-monitor.yaml in the working directory)
GERRIT_MONITOR_CONFIG = os.environ.get("GERRIT_MONITOR_CONFIG")

REQUEST_TIMEOUT = float(os.environ.get("GERRIT_REQUEST_TIMEOUT", "30"))

# Every Gerrit JSON reply starts with this to defeat XSSI.
GERRIT_JSON_PREFIX = ")]}'\n"

# A CL with no human message for this long is stale
STALE_AFTER = timedelta(hours=24)
