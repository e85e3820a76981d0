#!/usr/bin/env python3
"""
🐍 Snake game engine
Core game rules with no dependency on a particular display.
The terminal front end drives it, tests drive it with fakes.
"""

import logging
import random
from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Union

logger = logging.getLogger(__name__)

# Coordinates are unsigned 16-bit values
MAX_COORD = 0xFFFF

QUIT = "quit"

# Why a round ended
COLLISION = "collision"
QUIT_REASON = "quit"


class SnakeError(Exception):
    """Base class for errors raised by the game"""


class Direction(Enum):
    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def opposite(self) -> "Direction":
        dx, dy = self.value
        return Direction((-dx, -dy))


class GameState(Enum):
    RUNNING = "running"
    OVER = "over"


class Cell(Enum):
    EMPTY = "empty"
    BORDER = "border"
    HEAD = "head"
    BODY = "body"
    FOOD = "food"


@dataclass(frozen=True)
class Position:
    x: int
    y: int

    def step(self, direction: Direction) -> "Position":
        """Neighbouring position; saturates at the coordinate limits instead of wrapping"""
        dx, dy = direction.value
        return Position(
            min(max(self.x + dx, 0), MAX_COORD),
            min(max(self.y + dy, 0), MAX_COORD),
        )


@dataclass(frozen=True)
class GameSettings:
    width: int = 28
    height: int = 20
    tick_ms: int = 100
    score_multiplier: int = 100

    def __post_init__(self):
        if self.width < 3 or self.height < 3:
            raise ValueError(f"Board must be at least 3x3, got {self.width}x{self.height}")
        if self.width > MAX_COORD or self.height > MAX_COORD:
            raise ValueError(f"Board dimensions must not exceed {MAX_COORD}")
        if self.tick_ms <= 0:
            raise ValueError(f"tick_ms must be positive, got {self.tick_ms}")


class GameRenderer(ABC):
    """Display surface the game draws itself on (terminal, test fake, ...)"""

    @abstractmethod
    def clear(self):
        pass

    @abstractmethod
    def draw_cell(self, x: int, y: int, cell: Cell):
        pass

    @abstractmethod
    def draw_status(self, text: str):
        pass

    @abstractmethod
    def refresh(self):
        pass


class InputHandler(ABC):
    """Source of player commands"""

    @abstractmethod
    def get_input(self, timeout_ms: int) -> Optional[Union[Direction, str]]:
        """Wait at most timeout_ms for a command: a Direction, QUIT or None"""


class FoodPlacer(ABC):
    """Chooses where the next piece of food goes"""

    @abstractmethod
    def place(self, width: int, height: int, occupied: Iterable[Position]) -> Position:
        pass


class RandomFoodPlacer(FoodPlacer):
    """Uniform placement in the interior, avoiding the snake while there is room"""

    max_attempts = 100

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None):
        self.rng = rng or random.Random(seed)

    def place(self, width: int, height: int, occupied: Iterable[Position]) -> Position:
        taken = set(occupied)

        for _ in range(self.max_attempts):
            candidate = self._random_interior(width, height)
            if candidate not in taken:
                return candidate

        # Crowded board: pick among whatever is left
        free = [
            Position(x, y)
            for y in range(1, height - 1)
            for x in range(1, width - 1)
            if Position(x, y) not in taken
        ]
        if free:
            return self.rng.choice(free)
        return self._random_interior(width, height)

    def _random_interior(self, width: int, height: int) -> Position:
        return Position(
            self.rng.randint(1, width - 2),
            self.rng.randint(1, height - 2),
        )


class Snake:
    """Body positions from head (front) to tail (back) plus the facing direction"""

    def __init__(self, start: Position, direction: Direction = Direction.RIGHT):
        self.body = deque([start])
        self.direction = direction

    @property
    def head(self) -> Position:
        return self.body[0]

    def advance(self):
        """Shift the whole body one cell along the current direction"""
        self.body.appendleft(self.head.step(self.direction))
        self.body.pop()

    def grow(self):
        """Duplicate the tail; the extra segment unfolds on the next advance"""
        self.body.append(self.body[-1])

    def __len__(self) -> int:
        return len(self.body)

    def __iter__(self) -> Iterator[Position]:
        return iter(self.body)

    def __contains__(self, position) -> bool:
        return position in self.body


class SnakeGame:
    """One round of Snake on a fixed board"""

    def __init__(self, settings: Optional[GameSettings] = None, food_placer: Optional[FoodPlacer] = None):
        self.settings = settings or GameSettings()
        self.width = self.settings.width
        self.height = self.settings.height
        self.food_placer = food_placer or RandomFoodPlacer()

        self.snake = Snake(Position(self.width // 2, self.height // 2))
        self.next_direction = self.snake.direction
        self.food = Position(max(self.width // 4, 1), max(self.height // 4, 1))
        self.score = 0
        self.ticks = 0
        self.state = GameState.RUNNING
        self.end_reason: Optional[str] = None

    @property
    def is_over(self) -> bool:
        return self.state == GameState.OVER

    def handle_direction_input(self, new_direction: Direction) -> bool:
        """Queue a turn unless it reverses the current heading"""
        if self.is_over:
            return False
        if new_direction == self.snake.direction.opposite:
            return False
        self.next_direction = new_direction
        return True

    def on_border(self, position: Position) -> bool:
        return (position.x == 0 or position.x == self.width - 1 or
                position.y == 0 or position.y == self.height - 1)

    def check_collision(self) -> bool:
        head = self.snake.head
        if self.on_border(head):
            return True
        body = iter(self.snake)
        next(body)
        return any(segment == head for segment in body)

    def check_food(self) -> bool:
        if self.snake.head != self.food:
            return False

        self.snake.grow()
        self.food = self.food_placer.place(self.width, self.height, self.snake)
        self.score += 1
        logger.debug("Food eaten at %s, score %d, next food at %s",
                     self.snake.head, self.score, self.food)
        return True

    def step(self) -> bool:
        """Advance one tick. Returns True when this tick ended the game"""
        if self.is_over:
            return False

        self.ticks += 1
        self.snake.direction = self.next_direction
        self.snake.advance()

        if self.check_collision():
            self.state = GameState.OVER
            self.end_reason = COLLISION
            logger.debug("Collision at %s after %d ticks", self.snake.head, self.ticks)
            return True

        self.check_food()
        return False

    def quit(self):
        if self.is_over:
            return
        logger.debug("Game quit after %d ticks", self.ticks)
        self.state = GameState.OVER
        self.end_reason = QUIT_REASON

    def display_score(self, multiplier: Optional[int] = None) -> int:
        if multiplier is None:
            multiplier = self.settings.score_multiplier
        return self.score * multiplier

    def cell_at(self, position: Position) -> Cell:
        if position == self.snake.head:
            return Cell.HEAD
        if position in self.snake:
            return Cell.BODY
        if position == self.food:
            return Cell.FOOD
        if self.on_border(position):
            return Cell.BORDER
        return Cell.EMPTY

    def status_line(self) -> str:
        return f"Score: {self.score}"

    def board_rows(self, glyphs: Optional[dict] = None) -> List[str]:
        """Plain-text board, mostly for tests and debugging"""
        glyphs = glyphs or DEFAULT_GLYPHS
        return [
            "".join(glyphs[self.cell_at(Position(x, y))] for x in range(self.width))
            for y in range(self.height)
        ]

    def render(self, renderer: GameRenderer):
        renderer.clear()
        for y in range(self.height):
            for x in range(self.width):
                renderer.draw_cell(x, y, self.cell_at(Position(x, y)))
        renderer.draw_status(self.status_line())
        renderer.refresh()


DEFAULT_GLYPHS = {
    Cell.EMPTY: " ",
    Cell.BORDER: "#",
    Cell.HEAD: "@",
    Cell.BODY: "O",
    Cell.FOOD: "*",
}


__all__ = [
    'SnakeGame', 'Snake', 'Position', 'Direction', 'GameState', 'Cell',
    'GameSettings', 'GameRenderer', 'InputHandler', 'FoodPlacer',
    'RandomFoodPlacer', 'SnakeError', 'DEFAULT_GLYPHS', 'QUIT', 'MAX_COORD',
    'COLLISION', 'QUIT_REASON'
]
