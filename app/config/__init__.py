"""
Configuration package for the Razorpay backend
Exports the settings loader for easy import
"""
from .settings import Settings, load_settings, validate_settings

__all__ = ["Settings", "load_settings", "validate_settings"]
