"""fission: split git commits into atomic commits."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fission")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
