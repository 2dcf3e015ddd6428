# csrf_guard/core/security/session.py
"""
Session capability used by the CSRF layer.

The CSRF code does not own session storage. It only needs ``get`` and
``set`` on the session of the current request; any backend that offers
those two operations works (cookie sessions, server-side stores, caches).
"""

from typing import MutableMapping, Optional, Protocol, runtime_checkable

from starlette.requests import HTTPConnection


@runtime_checkable
class SessionStore(Protocol):
    """Key-value view on the current request's session"""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MappingSession:
    """
    Adapts a mutable mapping (e.g. Starlette's ``request.session`` dict)
    to the ``SessionStore`` interface.
    """

    def __init__(self, data: MutableMapping[str, str]):
        self._data = data

    def get(self, key: str) -> Optional[str]:
        value = self._data.get(key)
        if value is None:
            return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def __repr__(self) -> str:
        return f"MappingSession(keys={sorted(self._data.keys())})"


def session_from_request(request: HTTPConnection) -> Optional[SessionStore]:
    """
    Return the session attached to ``request`` or None.

    Starlette's SessionMiddleware puts the session dict into the ASGI scope.
    Without it (or when it runs after us) there is no session.
    """
    if "session" not in request.scope:
        return None
    return MappingSession(request.scope["session"])
