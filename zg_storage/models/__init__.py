"""Pydantic models exchanged over the HTTP API."""

from .schemas import ErrorResponse, UploadResponse  # noqa: F401
