"""Factory for creating signal sources by kind."""
from typing import Dict, List, Type

from .base import SignalSource


class SourceFactory:
    """
    Registry of signal source classes keyed by kind.

    The arrangement loader uses this to build sources from document
    sections, so new source types become available to configurations
    by registering them here.

    Usage:
        wave = SourceFactory.create('waveform', name='sine', equation='sin(x)')

        # Register custom source
        SourceFactory.register('noise', NoiseSource)
    """

    _registry: Dict[str, Type[SignalSource]] = {}

    @classmethod
    def register(cls, kind: str, source_class: Type[SignalSource]) -> None:
        """
        Register a source class.

        Args:
            kind: Kind to register under (case-insensitive)
            source_class: SignalSource subclass
        """
        cls._registry[kind.lower()] = source_class

    @classmethod
    def unregister(cls, kind: str) -> bool:
        """Remove a registered kind. Returns True if it was present."""
        return cls._registry.pop(kind.lower(), None) is not None

    @classmethod
    def create(cls, kind: str, **kwargs) -> SignalSource:
        """
        Create a source of the given kind.

        Args:
            kind: Source kind (case-insensitive)
            **kwargs: Passed to the source constructor

        Raises:
            KeyError: If no source class is registered for ``kind``
        """
        source_class = cls._registry.get(kind.lower())
        if source_class is None:
            raise KeyError(f"No signal source registered for kind '{kind}'")
        return source_class(**kwargs)

    @classmethod
    def get_registered(cls) -> List[str]:
        return sorted(cls._registry)

    @classmethod
    def is_registered(cls, kind: str) -> bool:
        return kind.lower() in cls._registry


# =============================================================================
# Register built-in sources
# =============================================================================

def _register_builtins():
    """Register built-in source implementations."""
    from .envelope import Envelope
    from .sample_bank import SampleBank
    from .waveform import Waveform

    SourceFactory.register(Waveform.kind, Waveform)
    SourceFactory.register(Envelope.kind, Envelope)
    SourceFactory.register(SampleBank.kind, SampleBank)


# Auto-register on import
_register_builtins()
