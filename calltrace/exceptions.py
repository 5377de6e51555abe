# Calltrace Exceptions


class CalltraceError(Exception):
    """Base exception for all calltrace errors."""

    def __init__(self, *args, detail: str | None = None):
        super().__init__(*args)
        # Use the first arg as detail if detail kwarg is not provided and args exist
        self.detail = detail or (args[0] if args else None)


class InvalidArgumentError(CalltraceError, ValueError):
    """Raised when a required construction argument is None.

    Attributes:
        parameter: The name of the parameter that was None.
    """

    def __init__(self, parameter: str):
        CalltraceError.__init__(self, f"{parameter} == None", detail=f"{parameter} must not be None")
        self.parameter = parameter


class UnsupportedOperationError(CalltraceError, TypeError):
    """Raised when code attempts to structurally modify an immutable view."""

    pass


class ServiceDefinitionError(CalltraceError, ValueError):
    """Raised when a service endpoint declaration is invalid."""

    pass
