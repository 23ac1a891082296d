"""
Service layer abstraction.

Each service wraps the backend calls for one domain (weddings, tasks,
documents and so on) together with the caching rules of that domain.
Services never raise on backend failures: they return ``None``, an
empty list or ``False`` and leave it to the API handlers to decide
whether absence means "not found" or "failed".
"""
