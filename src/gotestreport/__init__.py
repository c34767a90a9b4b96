"""Static HTML reports from go test -json event streams."""

__version__ = "0.1.0"
