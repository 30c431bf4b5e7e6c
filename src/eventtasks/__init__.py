"""eventtasks - event task template manager."""

__version__ = "0.1.0"
