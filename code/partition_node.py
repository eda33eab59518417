"""Binary space partition tree that carves a region into rooms and corridors."""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from generation_context import GenerationContext
from layout_constants import SPLIT_GRID_STEP
from layout_geometry import Rect, SplitAxis


class PartitionNode:
    """One rectangular region of the dungeon.

    A node is either a leaf (no children, no corridor), which becomes a room, or
    an internal node whose ``corridor`` separates its ``left`` and ``right``
    children. The left child always holds the lower coordinates. Children are
    owned exclusively by their parent; there are no back-references.
    """

    def __init__(
        self,
        bounds: Rect,
        corridor_width: int,
        min_room_size: int,
        adjusted_min_room_size: int,
        split_chance: float,
        min_iterations_before_chance_applies: int,
        context: GenerationContext,
        *,
        split_grid_step: int = SPLIT_GRID_STEP,
    ) -> None:
        if corridor_width < 0:
            raise ValueError("PartitionNode corridor_width cannot be negative")
        if min_room_size <= 0 or adjusted_min_room_size <= 0:
            raise ValueError("PartitionNode room sizes must be positive")
        if not (0.0 <= split_chance <= 1.0):
            raise ValueError("PartitionNode split_chance must lie within [0, 1]")

        self.bounds = bounds
        self.corridor_width = corridor_width
        self.min_room_size = min_room_size
        self.adjusted_min_room_size = adjusted_min_room_size
        self.split_chance = split_chance
        self.min_iterations_before_chance_applies = min_iterations_before_chance_applies
        self.split_grid_step = split_grid_step
        self.context = context

        self.corridor: Optional[Rect] = None
        self.split_axis: Optional[SplitAxis] = None
        self.left: Optional[PartitionNode] = None
        self.right: Optional[PartitionNode] = None
        self._split_called = False

        context.note_node_built()

    def __repr__(self) -> str:
        kind = "leaf" if self.is_leaf() else "internal"
        return f"PartitionNode({kind}, bounds={self.bounds.to_tuple()})"

    # ------------------------------------------------------------------
    # Splitting
    # ------------------------------------------------------------------
    def split(self) -> None:
        """Split this node and then every node it produces, in pre-order.

        Walks an explicit stack. Both children of a node are built before
        either is split, and the left subtree is finished before the right one,
        so the order of random draws matches a recursive descent.
        """
        stack: List[PartitionNode] = [self]
        while stack:
            node = stack.pop()
            node._split_once()
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def _split_once(self) -> None:
        if self._split_called:
            raise RuntimeError(f"{self!r} has already been split")
        self._split_called = True

        if self._should_stop_early():
            return

        if self._too_small_to_split():
            if self.corridor_width == 0:
                return
            # Too small for a corridor: fall back to rooms that share a wall.
            self.corridor_width = 0
            self.min_room_size = self.adjusted_min_room_size
            if self._too_small_to_split():
                return

        axis = self._choose_split_axis()
        if axis is SplitAxis.VERTICAL:
            self._split_vertically()
        else:
            self._split_horizontally()
        self.split_axis = axis

    def _should_stop_early(self) -> bool:
        # Draw unconditionally: the random sequence must not depend on the counter.
        roll = self.context.rng.random()
        return roll <= self.split_chance and self.context.has_reached(
            self.min_iterations_before_chance_applies
        )

    def _too_small_to_split(self) -> bool:
        limit = 2 * self.min_room_size + self.corridor_width
        return self.bounds.width <= limit and self.bounds.height <= limit

    def _choose_split_axis(self) -> SplitAxis:
        if self.bounds.width > self.bounds.height:
            return SplitAxis.VERTICAL
        if self.bounds.height > self.bounds.width:
            return SplitAxis.HORIZONTAL
        return SplitAxis.HORIZONTAL if self.context.rng.random() > 0.5 else SplitAxis.VERTICAL

    def _pick_split_coordinate(self, low_edge: int, high_edge: int) -> int:
        """Choose where the corridor band starts along the split axis."""
        lowest = low_edge + self.min_room_size
        highest = high_edge - self.min_room_size - self.corridor_width
        raw = self.context.rng.randint(lowest, highest)
        snapped = snap_to_step(raw, self.split_grid_step, lowest, highest)
        # The corridor band has to stay inside the parent.
        return max(low_edge, min(snapped, high_edge - self.corridor_width))

    def _split_vertically(self) -> None:
        b = self.bounds
        split_x = self._pick_split_coordinate(b.x, b.max_x)
        self.left = self._make_child(Rect(b.x, b.y, split_x - b.x, b.height))
        self.right = self._make_child(
            Rect(split_x + self.corridor_width, b.y, b.max_x - split_x - self.corridor_width, b.height)
        )
        self.corridor = Rect(split_x, b.y, self.corridor_width, b.height)

    def _split_horizontally(self) -> None:
        b = self.bounds
        split_y = self._pick_split_coordinate(b.y, b.max_y)
        self.left = self._make_child(Rect(b.x, b.y, b.width, split_y - b.y))
        self.right = self._make_child(
            Rect(b.x, split_y + self.corridor_width, b.width, b.max_y - split_y - self.corridor_width)
        )
        self.corridor = Rect(b.x, split_y, b.width, self.corridor_width)

    def _make_child(self, bounds: Rect) -> PartitionNode:
        return PartitionNode(
            bounds,
            self.corridor_width,
            self.min_room_size,
            self.adjusted_min_room_size,
            self.split_chance,
            self.min_iterations_before_chance_applies,
            self.context,
            split_grid_step=self.split_grid_step,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None

    @property
    def is_corridor_less(self) -> bool:
        return self.corridor_width == 0

    @property
    def children(self) -> Tuple[PartitionNode, ...]:
        return tuple(child for child in (self.left, self.right) if child is not None)

    def iter_nodes(self) -> Iterator[PartitionNode]:
        """Yield every node of this subtree in pre-order."""
        stack: List[PartitionNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def collect_all_nodes(self) -> List[PartitionNode]:
        return list(self.iter_nodes())

    def collect_leaf_nodes(self) -> List[PartitionNode]:
        return [node for node in self.iter_nodes() if node.is_leaf()]

    def collect_corridors(self) -> List[Rect]:
        return [node.corridor for node in self.iter_nodes() if node.corridor is not None]

    def depth(self) -> int:
        """Number of levels below this node (0 for a leaf)."""
        deepest = 0
        stack: List[Tuple[PartitionNode, int]] = [(self, 0)]
        while stack:
            node, level = stack.pop()
            deepest = max(deepest, level)
            for child in node.children:
                stack.append((child, level + 1))
        return deepest


def snap_to_step(value: int, step: int, lowest: int, highest: int) -> int:
    """Round ``value`` to the nearest multiple of ``step`` without leaving [lowest, highest].

    When no multiple of ``step`` fits in the range the unsnapped value is kept.
    """
    if step <= 1:
        return value
    snapped = int(round(value / step)) * step
    if snapped < lowest:
        snapped += step
    elif snapped > highest:
        snapped -= step
    if lowest <= snapped <= highest:
        return snapped
    return value
