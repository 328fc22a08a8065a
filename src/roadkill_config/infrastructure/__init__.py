"""Infrastructure: backing stores for the settings."""
