"""Configuration, logging, backend access, caching and security."""
