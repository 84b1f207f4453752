"""Core infrastructure: settings, logging setup, key/value persistence."""
