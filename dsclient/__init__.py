"""Asynchronous client for the DeepSeek chat completions API: models, request builder and a small command."""

__version__ = "0.1.0"