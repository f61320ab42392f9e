"""Custom errors for the AAD engine."""


class AADError(RuntimeError):
    pass


class UnsupportedOperationError(AADError, NotImplementedError):
    """The operation cannot be differentiated (e.g. `apply` of an arbitrary function)."""


class InvalidArgumentError(AADError, ValueError):
    pass
