"""Treasure pickup detection."""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence

from .entities import Player, Treasure
from .events import EffectEvent

logger = logging.getLogger(__name__)


@dataclass
class PickupResult:
    """Outcome of one scan."""
    collected: List[Treasure] = field(default_factory=list)
    score_delta: int = 0
    events: List[EffectEvent] = field(default_factory=list)
    won: bool = False  # True only on the scan that completed the set


class CollectibleDetector:
    """Marks treasures collected when the player's centre comes close enough.

    Distance is measured to the treasure's logical anchor, not to wherever
    the renderer happens to draw it while it bobs.
    """

    def __init__(self, pickup_radius: float = 25.0):
        self.pickup_radius = pickup_radius

    def scan(
        self,
        player: Player,
        treasures: Sequence[Treasure],
        already_won: bool = False,
    ) -> PickupResult:
        """Collect every uncollected treasure within range.

        Args:
            player: Player whose centre is tested.
            treasures: All treasures in the session (mutated in place).
            already_won: Whether the session has already been won. WIN is
                only reported when this is False.

        Returns:
            PickupResult with a COLLECT event per pickup and, if this scan
            collected the last treasure, a trailing WIN event.
        """
        result = PickupResult()
        cx, cy = player.center

        for treasure in treasures:
            if treasure.collected:
                continue
            distance = math.hypot(treasure.x - cx, treasure.y - cy)
            if distance < self.pickup_radius:
                treasure.collected = True
                result.collected.append(treasure)
                result.score_delta += treasure.value
                result.events.append(EffectEvent.COLLECT)
                logger.debug(
                    "Collected %s at (%.0f, %.0f) for %d",
                    treasure.kind.name.lower(), treasure.x, treasure.y, treasure.value,
                )

        if treasures and not already_won and all(t.collected for t in treasures):
            result.won = True
            result.events.append(EffectEvent.WIN)

        return result
