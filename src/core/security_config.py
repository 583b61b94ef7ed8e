"""Security configuration constants for the AI CFO API.

This module centralizes security-related configuration including:
- Sensitive keys that should be sanitized from logs
- Error handling security settings
"""

# Keys redacted from structured logs
SENSITIVE_KEYS: set[str] = {
    # Credentials
    "password",
    "secret",
    "token",
    "access_token",
    "authorization",
    "api_key",
    "openai_api_key",
    "bearer",
    "cookie",
    "set-cookie",
    "x-api-key",
    # Personal Identifiable Information
    "email",
    "phone",
    "address",
    "account_number",
}

# Production-only error response fields
# In production, error responses should only contain these fields to
# prevent information leakage
PRODUCTION_ERROR_FIELDS: set[str] = {
    "correlation_id",
    "type",
}

# Development error response fields (additional fields allowed in development)
DEVELOPMENT_ERROR_FIELDS: set[str] = PRODUCTION_ERROR_FIELDS | {
    "details",
    "traceback",
    "exception_type",
    "validation_errors",
}


def get_allowed_error_fields(environment: str) -> set[str]:
    """Get allowed error response fields based on environment.

    Args:
        environment: The application environment (production, development, etc.)

    Returns:
        Set of allowed field names for error responses
    """
    if environment == "production":
        return PRODUCTION_ERROR_FIELDS.copy()
    else:
        return DEVELOPMENT_ERROR_FIELDS.copy()


def is_sensitive_key(key: str) -> bool:
    """Check if a key should be considered sensitive and redacted."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in SENSITIVE_KEYS)
