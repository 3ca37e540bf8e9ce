"""API layer: the surface host applications call.

Key rules:

1. No SQLAlchemy imports - only call repo, composer and mutation functions
2. Session may be imported for type hints only
3. Errors are mapped to transport status codes here and nowhere else
"""
