"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services wrap collaborators that live outside the process
    (secure storage, the git binary, the hosting provider's CLI).
    """

    pass
