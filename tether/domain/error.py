"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Domain validation error.

    Raised for identity assertions that cannot be provisioned, before any
    write reaches the store.
    """

    pass


class ConstraintViolationError(DomainError):
    """Raised when a write would break a uniqueness constraint.

    Inside the provisioning engine this signals a lost race against a
    concurrent call for the same external identity.
    """

    def __init__(self, constraint: str, detail: str | None = None):
        self.constraint = constraint
        message = f"Uniqueness constraint violated: {constraint}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ProvisioningError(DomainError):
    """Raised when an identity assertion could not be reconciled.

    The store is left untouched: every write of the failed call is rolled back.
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")
