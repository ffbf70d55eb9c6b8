"""Ghostpad — a text editor with inline LLM ghost-text suggestions."""

__version__ = "0.3.0"
