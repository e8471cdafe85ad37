"""Agent personas, agent tools and terminal UI models."""

__version__ = "0.1.0"