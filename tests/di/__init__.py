"""Mock providers for testing."""

from .gateway import MockGatewayProvider
from .container import build_test_container

__all__ = [
    "MockGatewayProvider",
    "build_test_container",
]
