"""Priority-aware, incremental code review planning."""

__version__ = "0.1.0"
