"""
Application errors

Each error maps to one HTTP status. Handlers in main.py render them as
{"error": <message>}.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = 400


class AuthenticationError(AppError):
    """Missing, expired or tampered credential."""
    status_code = 401


class AuthorizationError(AppError):
    """Identified caller lacks the role or ownership required."""
    status_code = 403


class NotFoundError(AppError):
    status_code = 404
