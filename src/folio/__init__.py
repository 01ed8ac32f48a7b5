"""Operator tooling for a personal-portfolio content platform."""

__version__ = "0.3.0"
