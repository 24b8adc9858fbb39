"""
Logging Sanitizer Utility

Redacts credentials and secrets from request payloads before they reach the logs.
Form posts, function payloads and email settings all pass through here.
"""

from typing import Dict, Any, Mapping


# Keys whose values must never be logged
SENSITIVE_FIELDS = {
    'password',
    'confirm_password',
    'current_password',
    'new_password',
    'secret',
    'token',
    'api_key',
    'apikey',
    'access_token',
    'refresh_token',
    'authorization',
    'csrf_token',
    'client_secret',
    'azure_client_secret',
    'email_function_secret',
    'service_role_key',
}


def sanitize_dict(data: Dict[str, Any], redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """
    Replace sensitive values in a (possibly nested) dictionary.

    Keys are matched case-insensitively. Lists of dictionaries are
    sanitized element by element.

    Example:
        >>> sanitize_dict({'username': 'admin', 'password': 'secret123'})
        {'username': 'admin', 'password': '[REDACTED]'}
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if str(key).lower() in SENSITIVE_FIELDS:
            sanitized[key] = redact_text
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, redact_text)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(item, redact_text) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized


def sanitize_form_data(form_data: Mapping, redact_text: str = '[REDACTED]') -> Dict[str, Any]:
    """Sanitize ``request.form`` (or any mapping) for safe logging."""
    return sanitize_dict(dict(form_data), redact_text)


def sanitize_exception_message(exception: Exception) -> str:
    """Return the exception text, or a placeholder when it mentions a sensitive field."""
    message = str(exception)
    if any(field in message.lower() for field in SENSITIVE_FIELDS):
        return f"{type(exception).__name__}: [Message contains sensitive data]"
    return message
