# pyden_site/core/errors.py
"""Domain errors raised by the services layer.

Routers translate these into HTTP responses; each class carries the status
code it maps to so the translation stays in one place.
"""
from __future__ import annotations


class SiteError(Exception):
    status_code: int = 500

    def __init__(self, message: str = "internal error"):
        super().__init__(message)
        self.message = message


class ValidationError(SiteError):
    status_code = 400


class AuthError(SiteError):
    status_code = 401


class NotFoundError(SiteError):
    status_code = 404


class DuplicateError(SiteError):
    status_code = 409


class InternalError(SiteError):
    status_code = 500
