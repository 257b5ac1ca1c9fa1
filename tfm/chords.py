"""Multi-key chord resolution with timeout-based disambiguation."""

from __future__ import annotations

from dataclasses import dataclass, field

from .keymap import Action, Keymap

CHORD_TIMEOUT_SECONDS = 0.35


@dataclass(frozen=True)
class Resolved:
    """The pending tokens completed a binding."""

    action: Action


@dataclass(frozen=True)
class Pending:
    """More input may extend the chord; a timeout for ``generation`` is due."""

    generation: int


@dataclass(frozen=True)
class NoMatch:
    """The input matched nothing and was dropped."""


FeedResult = Resolved | Pending | NoMatch


@dataclass
class ChordResolver:
    """Accumulate key tokens until they name exactly one binding.

    ``generation`` increases on every token and every resolution, so a
    timeout scheduled for an older generation is recognised as stale.
    """

    keymap: Keymap
    pending: list[str] = field(default_factory=list)
    generation: int = 0

    def reset(self) -> None:
        self.pending = []
        self.generation += 1

    def feed(self, token: str) -> FeedResult:
        """Append ``token`` and classify the pending sequence."""
        self.pending.append(token)
        result = self._classify()
        if result is not None:
            return result

        # The chord is broken; retry the new key on its own.
        self.pending = [token]
        result = self._classify()
        if result is not None:
            return result
        self.reset()
        return NoMatch()

    def _classify(self) -> FeedResult | None:
        tokens = tuple(self.pending)
        exact = self.keymap.exact(tokens)
        if self.keymap.is_prefix(tokens):
            self.generation += 1
            return Pending(self.generation)
        if exact is not None:
            self.reset()
            return Resolved(exact)
        return None

    def on_timeout(self, generation: int) -> Action | None:
        """Resolve a pending chord whose timeout for ``generation`` fired.

        Stale generations are ignored. Otherwise the exact binding for the
        pending tokens wins if there is one, and the pending state is cleared
        either way.
        """
        if generation != self.generation or not self.pending:
            return None
        action = self.keymap.exact(tuple(self.pending))
        self.reset()
        return action


__all__ = [
    "CHORD_TIMEOUT_SECONDS",
    "ChordResolver",
    "FeedResult",
    "NoMatch",
    "Pending",
    "Resolved",
]
