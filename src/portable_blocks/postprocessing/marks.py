"""Block-scoped registry of link mark definitions.

Each block owns its annotations: a link target is defined once per block
and every run that points at it references the same key. The registry is
created from a block's existing definitions, extended while runs are
rewritten, and read back when the new block is assembled.
"""

from collections.abc import Iterable

from portable_blocks.config import LINK_KEY_PREFIX
from portable_blocks.models.document import LINK_MARK_KIND, MarkDefinition


class MarkRegistry:
    """Deduplicating registry of link definitions for one block.

    Example:
        >>> registry = MarkRegistry()
        >>> registry.resolve("https://example.com")
        'link-0'
        >>> registry.resolve("https://example.com")
        'link-0'
        >>> registry.resolve("https://example.org")
        'link-1'
    """

    def __init__(
        self,
        definitions: Iterable[MarkDefinition] = (),
        reserved: Iterable[str] = (),
    ) -> None:
        """Initialize the registry from a block's existing definitions.

        Args:
            definitions: Mark definitions already present on the block.
            reserved: Keys spans already reference without a definition;
                they are never handed out.
        """
        self._definitions: list[MarkDefinition] = list(definitions)
        self._initial_count = len(self._definitions)
        self._keys = {definition.key for definition in self._definitions} | set(reserved)
        self._by_target: dict[str, str] = {}
        for definition in self._definitions:
            if definition.is_link:
                self._by_target.setdefault(definition.href, definition.key)
        self._next_index = 0

    def resolve(self, target: str) -> str:
        """Return the key for ``target``, registering a new definition if needed.

        Args:
            target: Exact link target (already normalized by the caller).

        Returns:
            The mark key referencing ``target`` in this block.
        """
        existing = self._by_target.get(target)
        if existing is not None:
            return existing

        key = self._allocate_key()
        self._definitions.append(MarkDefinition(key=key, kind=LINK_MARK_KIND, href=target))
        self._by_target[target] = key
        return key

    def _allocate_key(self) -> str:
        while f"{LINK_KEY_PREFIX}-{self._next_index}" in self._keys:
            self._next_index += 1
        key = f"{LINK_KEY_PREFIX}-{self._next_index}"
        self._keys.add(key)
        self._next_index += 1
        return key

    @property
    def definitions(self) -> tuple[MarkDefinition, ...]:
        """All definitions, existing ones first, in registration order."""
        return tuple(self._definitions)

    @property
    def added(self) -> tuple[MarkDefinition, ...]:
        """Definitions registered since the registry was created."""
        return tuple(self._definitions[self._initial_count :])

    def __contains__(self, target: object) -> bool:
        return target in self._by_target

    def __len__(self) -> int:
        return len(self._definitions)
