class GradebookError(Exception):
    pass


class GradebookValidationError(GradebookError):
    """The uploaded file or request cannot be processed. Nothing was written."""

    def __init__(self, messages):
        if isinstance(messages, str):
            messages = [messages]
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class CourseReferenceError(GradebookError):
    """A course or teacher reference is invalid (unknown teacher, duplicate or inactive course)."""


class CourseNotFoundError(GradebookError):
    pass


class IdentityCollisionExhausted(GradebookError):
    pass


class ParseRecoveryWarning(UserWarning):
    """A cell or name needed heuristic correction. Collected, never raised."""

    def __init__(self, message, line=None):
        self.line = line
        if line is not None:
            message = f"Line {line}: {message}"
        super().__init__(message)
