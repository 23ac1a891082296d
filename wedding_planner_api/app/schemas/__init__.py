"""
Pydantic schema definitions for API payloads.

Each domain (weddings, tasks, documents and so on) defines its own
models for request and response bodies.  Request models carry the form
validation rules, so invalid input is rejected with a 422 response
listing the offending fields.
"""
