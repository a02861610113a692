"""Trade journal with behavioral insights and pre-trade risk checks."""

__version__ = "0.1.0"
