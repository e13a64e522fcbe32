"""Browser automation helpers built around a network request tracker."""

__version__ = "0.1.0"
