"""Apollo Chat: a single-page client for LLM messages APIs."""

__version__ = "0.1.0"
