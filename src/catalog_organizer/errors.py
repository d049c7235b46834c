"""Exceptions raised by the catalog layer and strict planning."""


class CatalogError(Exception):
    """Base class for catalog document errors."""


class EndpointNotFoundError(CatalogError, KeyError):
    """The requested method/path pair is not in the document."""

    def __init__(self, method: str, path: str, available: list[str]):
        self.method = method
        self.path = path
        self.available = available
        super().__init__(f"{method.upper()} {path} not found")

    def __str__(self) -> str:
        return self.args[0]


class UnknownStrategyError(ValueError):
    """Raised by strict planning for a strategy name outside the known set."""
