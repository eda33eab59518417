"""Per-run state shared by every partition node built during one generation."""

from __future__ import annotations

import random
from dataclasses import dataclass, field


@dataclass
class GenerationContext:
    """Counts node constructions and owns the run's random source.

    The counter feeds the split-chance gate, so it must start at zero for every
    run. Concurrent runs each need their own context.
    """

    rng: random.Random = field(default_factory=random.Random)
    iterations: int = 0

    @classmethod
    def seeded(cls, seed: int | None) -> "GenerationContext":
        return cls(rng=random.Random(seed))

    def reset(self, seed: int | None = None) -> None:
        """Zero the node counter, and reseed the random source when ``seed`` is given."""
        self.iterations = 0
        if seed is not None:
            self.rng.seed(seed)

    def note_node_built(self) -> int:
        self.iterations += 1
        return self.iterations

    def has_reached(self, count: int) -> bool:
        return self.iterations >= count
