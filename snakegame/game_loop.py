"""Fixed-interval tick loop with bounded input polling."""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .core import QUIT, Direction, SnakeGame

logger = logging.getLogger(__name__)


@dataclass
class GameOutcome:
    reason: str
    score: int
    display_score: int
    length: int
    ticks: int


def run_game(game: SnakeGame, terminal, tick_ms: Optional[int] = None,
             clock: Callable[[], float] = time.monotonic) -> GameOutcome:
    """Drive the game until a collision or a quit command.

    `terminal` is both the GameRenderer and the InputHandler. Each iteration
    makes two independent checks: whether a tick is due, and whether input
    arrives before the next one. Input never waits past the next tick.
    """
    if tick_ms is None:
        tick_ms = game.settings.tick_ms
    interval = tick_ms / 1000.0

    # A round that has already ended is reported as it stands
    if not game.is_over:
        game.render(terminal)
    last_tick = clock()

    while not game.is_over:
        if clock() - last_tick >= interval:
            if game.step():
                break
            game.render(terminal)
            last_tick = clock()

        remaining = interval - (clock() - last_tick)
        timeout_ms = max(1, int(math.ceil(remaining * 1000)))

        command = terminal.get_input(timeout_ms)
        if command == QUIT:
            game.quit()
        elif isinstance(command, Direction):
            game.handle_direction_input(command)

    outcome = GameOutcome(
        reason=game.end_reason,
        score=game.score,
        display_score=game.display_score(),
        length=len(game.snake),
        ticks=game.ticks,
    )
    logger.info("Game over (%s): score %d, length %d, %d ticks",
                outcome.reason, outcome.score, outcome.length, outcome.ticks)
    return outcome
