"""
Domain errors raised by services and turned into the JSON envelope
``{"success": false, "message": ...}`` by the handlers in ``app.main``.
"""
from typing import Dict, Optional


class AppError(Exception):
    status_code = 500

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers


class BadRequestError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class PermissionDeniedError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class PayloadTooLargeError(AppError):
    status_code = 413


class RangeNotSatisfiableError(AppError):
    status_code = 416
