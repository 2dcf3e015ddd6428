"""CSRF Guard - session-bound CSRF protection for Starlette/FastAPI"""

__version__ = "1.0.0"
