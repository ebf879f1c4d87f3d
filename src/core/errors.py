from __future__ import annotations

class UserFacingError(Exception):
    """Base exception carrying user-presentable context."""

    def __init__(self, message: str, *, title: str, remediation: str | None = None) -> None:
        super().__init__(message)
        self.title = title
        self.remediation = remediation or ""


class MissingArgumentError(UserFacingError):
    pass


class ConfigurationTypeError(UserFacingError):
    pass


class ScriptNotFoundError(UserFacingError):
    pass


class DriverUnavailableError(UserFacingError):
    pass


class StatementExecutionError(UserFacingError):
    """A SQL statement was rejected by the engine; ``statement`` holds its text."""

    def __init__(
        self,
        message: str,
        *,
        statement: str,
        title: str = "SQL Statement Failed",
        remediation: str | None = None,
    ) -> None:
        super().__init__(f"{message}: {statement}", title=title, remediation=remediation)
        self.statement = statement
        self.engine_message = message


class InvalidDescriptorError(UserFacingError):
    pass


class UnknownFixtureError(UserFacingError):
    pass


class TemplateInstallError(UserFacingError):
    pass


class PluginNameError(UserFacingError):
    pass


def missing_argument(name: str, what: str) -> MissingArgumentError:
    return MissingArgumentError(
        f"need {what}",
        title="Missing Argument",
        remediation=f"Pass a value for '{name}'.",
    )


__all__ = [
    "UserFacingError",
    "MissingArgumentError",
    "ConfigurationTypeError",
    "ScriptNotFoundError",
    "DriverUnavailableError",
    "StatementExecutionError",
    "InvalidDescriptorError",
    "UnknownFixtureError",
    "TemplateInstallError",
    "PluginNameError",
    "missing_argument",
]
