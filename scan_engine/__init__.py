"""Factory scan engine: scan resolution and machine state transitions."""

__version__ = "0.1.0"
