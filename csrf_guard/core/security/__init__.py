"""
Security module for CSRF protection.

Centralizes the CSRF building blocks:
- Per-session secret management
- Token issuance and verification
- The application-wide protection service
"""

from .session import SessionStore, MappingSession, session_from_request
from .secret_manager import SecretManager
from .token_codec import TokenCodec
from .protect import (
    CSRFProtect,
    create_token,
    csrf_form_field,
    get_csrf_protect,
    init_csrf_protect,
    protect_for_request
)

__all__ = [
    'SessionStore',
    'MappingSession',
    'session_from_request',
    'SecretManager',
    'TokenCodec',
    'CSRFProtect',
    'create_token',
    'csrf_form_field',
    'get_csrf_protect',
    'init_csrf_protect',
    'protect_for_request'
]
