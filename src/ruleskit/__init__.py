"""ruleskit — layered rule generation for AI coding assistants."""

__version__ = "0.4.0"
