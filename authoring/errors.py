from __future__ import annotations


class AuthoringError(RuntimeError):
    pass


class SchemaError(AuthoringError):
    pass


class ValidationError(AuthoringError):
    def __init__(self, problems: list[str] | str):
        self.problems = [problems] if isinstance(problems, str) else list(problems)
        super().__init__("; ".join(self.problems))


class MediaValidationError(ValidationError):
    pass


class SubmissionInProgress(AuthoringError):
    pass
