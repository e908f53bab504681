from __future__ import annotations


class CaseHubError(ValueError):
    """Base class for rule violations raised by the service layer."""


class EmailAlreadyRegisteredError(CaseHubError):
    def __init__(self, email: str) -> None:
        super().__init__("User with that email already exists")
        self.email = email


class InvalidCredentialsError(CaseHubError):
    def __init__(self) -> None:
        super().__init__("Invalid email or password")


class UserNotFoundError(CaseHubError):
    def __init__(self, user_id: str) -> None:
        super().__init__(f"User with ID: {user_id} not found")
        self.user_id = user_id


class UserHasCasesError(CaseHubError):
    """Raised when deleting a user that still owns cases."""

    def __init__(self, user_id: str, case_count: int) -> None:
        super().__init__(f"User with ID: {user_id} still owns {case_count} case(s)")
        self.user_id = user_id
        self.case_count = case_count


class CaseNotFoundError(CaseHubError):
    def __init__(self, case_id: str) -> None:
        super().__init__(f"Case with ID: {case_id} not found")
        self.case_id = case_id


class CaseTitleConflictError(CaseHubError):
    def __init__(self, title: str) -> None:
        super().__init__("Case with that title already exists")
        self.title = title


class UnsupportedCaseMethodError(CaseHubError):
    def __init__(self, method: str) -> None:
        super().__init__(f"Method: {method} is not supported")
        self.method = method


class CaseExecutionError(CaseHubError):
    """Raised when the request for a case could not be delivered."""
