"""Configuration — settings loaded from env vars and YAML."""
