from fieldsales_console.app.domain.policies.scope_policy import ScopeDeniedError
from fieldsales_console.app.ui.forms import FormValidationError
from fieldsales_console.clients.backend_sdk.exceptions import ApiError, AuthError, TransportError


class ErrorMapper:
    _KNOWN_CODES = {
        "ROLE_MISMATCH": ("This account is not authorized for the selected role.", "Sign in with the matching login tab."),
        "INVALID_ROW": ("The backend returned a record in an unexpected shape.", "Report the resource and try again later."),
        "PGRST116": ("The requested record was not found.", "Refresh the list; it may have been removed."),
        "23505": ("A record with the same identifier already exists.", "Use a different employee id or phone number."),
    }

    _STATUS_HINTS = {
        401: ("AUTH_ERROR", "Your session is invalid or has expired.", "Sign in again."),
        403: ("PERMISSION_DENIED", "You do not have access to this data.", "Ask an administrator for access."),
        404: ("NOT_FOUND", "The requested record was not found.", "Refresh the list and try again."),
        429: ("RATE_LIMITED", "Too many requests.", "Wait a moment, then try again."),
        500: ("SERVER_ERROR", "The backend failed to process the request.", "Try again in a few seconds."),
    }

    @classmethod
    def to_payload(cls, error: Exception) -> dict:
        if isinstance(error, FormValidationError):
            return {
                "code": "VALIDATION_ERROR",
                "message": str(error),
                "details": {issue.field: issue.reason for issue in error.issues},
                "suggestion": "Fill in the highlighted fields.",
            }
        if isinstance(error, ScopeDeniedError):
            return {
                "code": "SCOPE_DENIED",
                "message": str(error),
                "details": {"resource": error.resource},
                "suggestion": "Return to the dashboard.",
            }
        if isinstance(error, TransportError):
            return {
                "code": "NETWORK_ERROR",
                "message": "The backend could not be reached.",
                "details": error.details,
                "suggestion": "Check your connection and try again.",
            }
        if isinstance(error, ApiError):
            if isinstance(error, AuthError) and error.code in cls._KNOWN_CODES:
                message, suggestion = cls._KNOWN_CODES[error.code]
                return {"code": error.code, "message": message, "details": error.details, "suggestion": suggestion}
            if isinstance(error, AuthError) and error.status_code != 401:
                return {
                    "code": "AUTH_ERROR",
                    "message": error.message,
                    "details": error.details,
                    "suggestion": "Check your credentials and try again.",
                }
            status_code = error.status_code or -1
            mapped = cls._STATUS_HINTS.get(status_code)
            if mapped is None and status_code >= 500:
                mapped = cls._STATUS_HINTS[500]
            if mapped is not None:
                code, message, suggestion = mapped
            else:
                message, suggestion = cls._KNOWN_CODES.get(error.code, (error.message, "Try again."))
                code = error.code
            return {"code": code, "message": message, "details": error.details, "suggestion": suggestion}
        return {
            "code": "INTERNAL_ERROR",
            "message": str(error),
            "details": None,
            "suggestion": "Try again and report the problem if it persists.",
        }

    @classmethod
    def to_display_message(cls, error: Exception) -> str:
        payload = cls.to_payload(error)
        return f"[{payload['code']}] {payload['message']}"
