"""Dynamic signal matcher registration system."""
import logging
from typing import Dict, List, Set, Type

logger = logging.getLogger(__name__)


class SignalRegistry:
    """Registry for discovering and instantiating signal matchers.

    Matchers run in registration order for every catalog entry, which fixes
    the order evidence is reported in.
    """

    _signals: Dict[str, Type] = {}
    _weights: Dict[str, int] = {}
    _order: List[str] = []  # Preserve registration order

    @classmethod
    def register(cls, name: str, weight: int):
        """Decorator to register a signal matcher class.

        Args:
            name: Unique identifier for the signal (e.g., "asn", "header")
            weight: Fixed positive weight of each evidence entry the signal produces

        Example:
            @SignalRegistry.register("header", weight=30)
            class HeaderSignal:
                def __init__(self, name: str, weight: int):
                    ...

                def match(self, entry: SignatureEntry, data: CollectedData) -> List[Evidence]:
                    ...
        """
        if weight <= 0:
            raise ValueError(f"Signal weight must be positive, got {weight}")

        def decorator(signal_class: Type):
            if name in cls._signals:
                logger.warning(f"Signal '{name}' already registered, overwriting")
            else:
                cls._order.append(name)

            cls._signals[name] = signal_class
            cls._weights[name] = weight
            logger.debug(f"Registered signal: {name} (weight {weight}) -> {signal_class.__name__}")
            return signal_class
        return decorator

    @classmethod
    def get_all_names(cls) -> List[str]:
        """Get names of all registered signals in registration order."""
        return cls._order.copy()

    @classmethod
    def get_weight(cls, name: str) -> int:
        return cls._weights[name]

    @classmethod
    def instantiate_all(cls, exclude: Set[str] = None) -> Dict[str, object]:
        """Instantiate registered signal matchers.

        Args:
            exclude: Set of signal names to leave out

        Returns:
            Dictionary mapping signal name to matcher instance, in registration order
        """
        exclude = exclude or set()
        unknown = exclude - set(cls._order)
        if unknown:
            raise ValueError(f"Unknown signal names: {', '.join(sorted(unknown))}")

        instances = {}
        for name in cls._order:
            if name in exclude:
                logger.info(f"Skipping excluded signal: {name}")
                continue
            instances[name] = cls._signals[name](name, cls._weights[name])
            logger.debug(f"Instantiated signal: {name}")
        return instances
