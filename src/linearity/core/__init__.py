"""Core infrastructure: configuration, logging, errors, command execution."""
