"""
Application package initializer.

The API is organised in layers: ``core`` (configuration, logging, the
backend client, cache and security), ``state`` (local list and viewer
state), ``services`` (backend access per domain), ``schemas`` (request
and response models) and ``api`` (versioned routers).  The application
object itself is built in ``main``.
"""
