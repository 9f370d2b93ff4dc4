"""Fitting Room - virtual try-on with Gemini image generation."""

__version__ = "1.0.0"
