# app/errors.py
"""
Application error taxonomy.
Each error carries the HTTP status it maps to; main.py converts them
into {"success": false, "error": ...} bodies at the request boundary.
"""

from fastapi import status


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Internal Server Error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = "Unauthorized"


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Missing required fields"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Not found"


class AnalysisParseError(AppError):
    """Classifier answered, but not with a usable JSON verdict."""
    public_message = "AI Analysis Failed"

    def __init__(self, message: str | None = None, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class ClassifierError(AppError):
    """The classifier call itself failed (network, auth, quota)."""
    public_message = "AI Analysis Failed"


class ClassifierConfigError(RuntimeError):
    """Raised at startup when the classifier cannot be constructed."""


class StoreError(AppError):
    public_message = "Internal Server Error"


class TokenCollisionError(StoreError):
    pass


class CodecError(StoreError):
    """Stored JSON column content could not be decoded."""
