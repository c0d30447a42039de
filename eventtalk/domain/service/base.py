"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold rules that don't belong to a single entity, such
    as who may mutate which record.
    """

    pass
