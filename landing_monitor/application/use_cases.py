"""
Use case base class.
"""

from abc import ABC, abstractmethod
from typing import Any


class UseCase(ABC):  # pylint: disable=too-few-public-methods
    """Base class for application use cases."""

    @abstractmethod
    def execute(self, *args: Any, **kwargs: Any) -> Any:
        """Run the use case."""
