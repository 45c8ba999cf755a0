"""
Dependency Injection Container

Holds the store handles and services shared by request handlers.
"""

import logging
import threading
from typing import Any, Dict, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class DependencyNotFoundError(Exception):
    """Raised when resolving a type that was never registered."""
    pass


class DependencyContainer:
    """
    Registry of shared instances keyed by type.

    Thread-safe: request threads resolve while the app factory registers.
    """

    def __init__(self):
        self._singletons: Dict[Type, Any] = {}
        self._lock = threading.Lock()

        logger.debug("DependencyContainer initialized")

    def register_singleton(self, interface: Type[T], implementation: T) -> None:
        """
        Register one shared instance for a type.

        Example:
            container.register_singleton(TransferService, transfer_service)
        """
        with self._lock:
            self._singletons[interface] = implementation
            logger.debug(f"Registered singleton: {interface.__name__}")

    def resolve(self, interface: Type[T]) -> T:
        """
        Resolve a registered type.

        Raises:
            DependencyNotFoundError: If the type is not registered
        """
        with self._lock:
            if interface not in self._singletons:
                raise DependencyNotFoundError(
                    f"No registration found for type: {interface.__name__}"
                )
            return self._singletons[interface]

    def is_registered(self, interface: Type) -> bool:
        with self._lock:
            return interface in self._singletons
