"""
Engine Registry
===============

Maps engine ids (run-time strings such as "scummv6") to factories that
build the matching Disassembler, so callers never dispatch on engine type
themselves.

The registry is populated once at startup by explicit register() calls
(see create_default_registry) and is only read afterwards, so a populated
registry can be shared by any number of callers.

Usage:
    registry = create_default_registry()

    for engine_id, description in registry.list():
        print(engine_id, description)

    disasm = registry.create("scummv6")
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Type
import logging

from scriptdis.disassembler import Disassembler, ScummV6Disassembler
from scriptdis.errors import DuplicateEngineError, UnknownEngineError


logger = logging.getLogger(__name__)

DisassemblerFactory = Callable[[], Disassembler]


@dataclass(frozen=True)
class EngineEntry:
    """
    One registered engine.

    Attributes:
        engine_id: Unique engine id
        description: Short human-readable label
        factory: Zero-argument callable returning a new Disassembler
    """
    engine_id: str
    description: str
    factory: DisassemblerFactory


class EngineListing:
    """
    Sorted (id, description) view over a registry.

    Iteration is lazy and can be repeated; every pass yields the same
    pairs in the same order.
    """

    def __init__(self, entries: Dict[str, EngineEntry]):
        self._entries = entries

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        for engine_id in sorted(self._entries):
            yield engine_id, self._entries[engine_id].description

    def __len__(self) -> int:
        return len(self._entries)


class EngineRegistry:
    """Registry of disassembler factories keyed by engine id."""

    def __init__(self) -> None:
        self._entries: Dict[str, EngineEntry] = {}

    def register(
        self,
        engine_id: str,
        factory: DisassemblerFactory,
        description: str = "",
    ) -> None:
        """
        Register a factory under engine_id.

        Args:
            engine_id: Unique, non-empty engine id
            factory: Zero-argument callable returning a Disassembler
                     (a Disassembler subclass works directly)
            description: Short human-readable label for listings

        Raises:
            DuplicateEngineError: If engine_id is already registered
            ValueError: If engine_id is empty
        """
        if not engine_id:
            raise ValueError("Engine id must be a non-empty string")
        if engine_id in self._entries:
            raise DuplicateEngineError(engine_id)

        self._entries[engine_id] = EngineEntry(engine_id, description, factory)
        logger.debug(f"Registered engine '{engine_id}' ({description})")

    def engine(
        self,
        engine_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Callable[[Type[Disassembler]], Type[Disassembler]]:
        """
        Class decorator registering a Disassembler subclass.

        The id and description default to the class attributes
        ``engine_id`` and ``description``.

            @registry.engine()
            class MyDisassembler(Disassembler):
                engine_id = "mine"
                description = "My engine"
        """
        def decorator(cls: Type[Disassembler]) -> Type[Disassembler]:
            self.register(
                engine_id or cls.engine_id,
                cls,
                cls.description if description is None else description,
            )
            return cls
        return decorator

    def list(self) -> EngineListing:
        """Return the (id, description) pairs sorted by id."""
        return EngineListing(self._entries)

    def ids(self) -> List[str]:
        return sorted(self._entries)

    def describe(self, engine_id: str) -> str:
        """
        Return the description registered for engine_id.

        Raises:
            UnknownEngineError: If engine_id is not registered
        """
        return self._lookup(engine_id).description

    def create(self, engine_id: str) -> Disassembler:
        """
        Build a new, unopened Disassembler for engine_id.

        Raises:
            UnknownEngineError: If engine_id is not registered
            TypeError: If the factory does not return a Disassembler
        """
        entry = self._lookup(engine_id)
        disasm = entry.factory()
        if not isinstance(disasm, Disassembler):
            raise TypeError(
                f"Factory for engine '{engine_id}' returned "
                f"{type(disasm).__name__}, not a Disassembler"
            )
        logger.debug(f"Created {type(disasm).__name__} for engine '{engine_id}'")
        return disasm

    def _lookup(self, engine_id: str) -> EngineEntry:
        try:
            return self._entries[engine_id]
        except KeyError:
            raise UnknownEngineError(engine_id, self._entries) from None

    def __contains__(self, engine_id: object) -> bool:
        return engine_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# =============================================================================
# Built-in Engines
# =============================================================================

BUILTIN_ENGINES: Tuple[Type[Disassembler], ...] = (
    ScummV6Disassembler,
)


def create_default_registry() -> EngineRegistry:
    """
    Create a registry with every engine shipped in this package.

    Returns:
        EngineRegistry populated with the built-in engines
    """
    registry = EngineRegistry()
    for engine_cls in BUILTIN_ENGINES:
        registry.register(engine_cls.engine_id, engine_cls, engine_cls.description)
    return registry
