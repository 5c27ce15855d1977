"""tokenguard: located token assertions for streaming structured-content parsers."""

__version__ = "0.1.0"
