"""EventFlow - group event planning lifecycle and venue recommendations."""

__version__ = "0.1.0"
