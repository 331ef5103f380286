"""Configuration — settings models, config discovery, logging setup."""
