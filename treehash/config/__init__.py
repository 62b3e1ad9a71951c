"""Configuration: exceptions, structlog setup and YAML settings."""
