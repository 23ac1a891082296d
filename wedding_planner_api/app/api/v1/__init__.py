"""Version 1 of the dashboard API."""
