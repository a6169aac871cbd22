"""Core configuration, logging and signing helpers."""
