"""Spa booking proxy: a thin FastAPI front for a Mindbody-style booking API."""

__version__ = "0.1.0"
