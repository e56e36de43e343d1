"""
Utility functions for the application.
"""
from typing import Any, Dict


def format_message(message: str) -> Dict[str, Any]:
    """Format a plain acknowledgement response."""
    return {"message": message}


def format_error(message: str, errors: Any = None) -> Dict[str, Any]:
    """Format error response."""
    response = {"message": message}
    if errors:
        response["errors"] = errors
    return response
