"""Core models, constants, configuration and exceptions."""
