"""A captain agent and its crew working tasks over an OpenAI-compatible chat API."""

__version__ = "0.1.0"