"""LLM integration."""

from .openai import OpenAIClient

__all__ = ["OpenAIClient"]
