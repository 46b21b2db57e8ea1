"""shoal - crypto market-intelligence data core."""

__version__ = "0.1.0"
