# users/views/__init__.py
"""Public auth views (register, login) and the authenticated profile view."""

from .auth import LoginView, RegisterView
from .me import MeView

__all__ = ["LoginView", "MeView", "RegisterView"]
