"""Error types raised by the noise engine."""

from typing import Any, Dict, List, Optional


class NoiseError(Exception):
    """Base error for the noise engine."""


class ConfigurationError(NoiseError, ValueError):
    """Raised when a noise configuration fails validation."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

    @classmethod
    def from_validation_error(cls, exc) -> "ConfigurationError":
        """Build from a pydantic ValidationError, keeping the field errors."""
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())),
                "message": error.get("msg", ""),
                "type": error.get("type", ""),
            }
            for error in exc.errors()
        ]
        summary = "; ".join(f"{e['field'] or '<root>'}: {e['message']}" for e in errors)
        return cls(f"Invalid noise configuration: {summary}", errors)


class DimensionError(NoiseError, ValueError):
    """Raised when coordinates do not match what a generator was built for."""
