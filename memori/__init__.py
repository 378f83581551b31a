"""Interactive memory scanner for Linux processes, reading them through /proc."""

__version__ = "0.1.0"