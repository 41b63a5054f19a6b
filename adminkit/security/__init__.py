"""安全相关组件."""

from .csrf import CsrfTokenStore, FlaskWtfCsrfTokenStore

__all__ = ["CsrfTokenStore", "FlaskWtfCsrfTokenStore"]
