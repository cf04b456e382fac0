"""Pipeline-friendly LLM prompt primitive."""

__version__ = "0.3.0"
