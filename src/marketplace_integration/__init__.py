"""Vercel marketplace integration backend for Entrolytics analytics."""

__version__ = "0.1.0"
