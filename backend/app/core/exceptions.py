class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class PlanValidationError(AppError):
    """Raised when an exam or holiday plan fails its pre-submission checks."""
    def __init__(self, message: str, issues: list[str] = None, details: dict = None):
        payload = dict(details or {})
        payload["issues"] = list(issues or [])
        super().__init__(message, status_code=422, details=payload)
        self.issues = payload["issues"]

class DraftStateError(AppError):
    """Raised when the exam authoring flow is driven through an illegal transition."""
    def __init__(self, current_state: str, action: str):
        super().__init__(
            f"Cannot {action} while draft is {current_state}",
            status_code=409,
            details={"state": current_state, "action": action},
        )

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)
