"""Wayfinder: AI-guided discovery of user journeys in web applications."""

__version__ = "0.1.0"
