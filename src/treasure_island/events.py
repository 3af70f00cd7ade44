"""Input snapshots and effect events exchanged with the host.

The host hands the controller one InputSnapshot per tick; the controller
hands back EffectEvents for the audio collaborator (and anyone else who
subscribes) to render.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Union

import numpy as np


class EffectEvent(Enum):
    """Discrete named triggers emitted by the simulation."""
    JUMP = "jump"
    STEP = "step"
    COLLECT = "collect"
    WIN = "win"


def _intent(value: Any) -> bool:
    """Read a single intent. Anything other than a real boolean is False."""
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    return False


@dataclass(frozen=True)
class InputSnapshot:
    """Player intents for one tick. Each flag is True while its control is held."""
    move_left: bool = False
    move_right: bool = False
    jump: bool = False
    restart: bool = False

    @classmethod
    def coerce(cls, value: Optional[Union["InputSnapshot", Mapping[str, Any]]]) -> "InputSnapshot":
        """Build a snapshot from whatever the host passed in.

        Accepts an InputSnapshot, a mapping of intent names to flags, or None.
        Unknown keys are ignored; missing or malformed flags read as False.
        """
        if value is None:
            return cls()
        if isinstance(value, InputSnapshot):
            return cls(
                move_left=_intent(value.move_left),
                move_right=_intent(value.move_right),
                jump=_intent(value.jump),
                restart=_intent(value.restart),
            )
        if isinstance(value, Mapping):
            return cls(
                move_left=_intent(value.get("move_left")),
                move_right=_intent(value.get("move_right")),
                jump=_intent(value.get("jump")),
                restart=_intent(value.get("restart")),
            )
        return cls()


IDLE = InputSnapshot()
