"""
Logging scope only. Do not implement beyond this file's responsibilities.
Structured logging for weight edits, profile application and suggestion review.
"""

import logging
from typing import Any, Dict, List


class StructuredLogger:
    """Structured logger for review operations."""

    def __init__(self, name: str = "priority_review"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {sanitize_payload(details)}"

        self.logger.info(message)

    def log_weight_change(self, weight_id: str, requested: float, normalized: float):
        """Log a single weight edit and the value it normalized to."""
        self.log_operation("weights.set", "success", {
            "weight_id": weight_id,
            "requested": requested,
            "normalized": round(normalized, 6)
        })

    def log_profile_applied(self, profile_id: str, matched: int, ignored: int):
        """Log a profile application."""
        details = {"profile_id": profile_id, "matched": matched}
        if ignored:
            details["ignored"] = ignored
        self.log_operation("weights.profile", "success", details)

    def log_suggestion_event(self, event: str, key: str, status: str, details: Dict[str, Any] = None):
        """Log a suggestion lifecycle event."""
        log_details = {"key": key}
        if details:
            log_details.update(details)

        self.log_operation(f"suggestion.{event}", status, log_details)

    def log_mutation_failure(self, key: str, error: Exception):
        """Log a failed downstream mutation. The key stays applied."""
        self.logger.warning(
            f"Operation: suggestion.mutation, Status: failed, Details: "
            f"{{'key': '{key}', 'error': '{str(error)[:100]}'}}"
        )

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


def sanitize_payload(payload: Any, reveal_sensitive: bool = False, sensitive_fields: List[str] = None) -> Any:
    """Sanitize payloads for audit logging."""
    if sensitive_fields is None:
        sensitive_fields = ['secret', 'password', 'token']

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if reveal_sensitive or k not in sensitive_fields:
                sanitized[k] = sanitize_payload(v, reveal_sensitive, sensitive_fields)
            else:
                sanitized[k] = "[REDACTED]"
        return sanitized
    elif isinstance(payload, str):
        # Truncate long strings
        return payload[:100] + "..." if len(payload) > 100 else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, reveal_sensitive, sensitive_fields) for item in payload]
    else:
        return payload


# Global logger instance
logger = StructuredLogger()
