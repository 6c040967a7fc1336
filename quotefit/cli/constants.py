"""Process exit codes for CLI commands."""

SYSTEM_EXIT_CODE = 1
VALIDATION_EXIT_CODE = 10
FETCH_EXIT_CODE = 20
MODEL_EXIT_CODE = 30

__all__ = ["SYSTEM_EXIT_CODE", "VALIDATION_EXIT_CODE", "FETCH_EXIT_CODE", "MODEL_EXIT_CODE"]
