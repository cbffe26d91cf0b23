"""Version information for agent-monitor."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("agent-monitor")
except PackageNotFoundError:
    # Running from source without an installed distribution
    __version__ = "0.0.0+unknown"
