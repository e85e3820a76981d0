#!/usr/bin/env python3
"""
Command line entry point: one game of Snake in the current terminal.

Controls:
- Arrow keys to move
- Esc to quit
"""

import argparse
import logging
import sys

from .core import GameSettings, RandomFoodPlacer, SnakeGame
from .game_loop import run_game
from .terminal import Terminal, TerminalError

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Play Snake in the terminal.")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for food placement (repeatable games)")
    parser.add_argument("--log-file", default=None,
                        help="Write log records to this file")
    parser.add_argument("--debug", action="store_true",
                        help="Log game events at DEBUG level (needs --log-file)")
    return parser.parse_args(argv)


def setup_logging(log_file=None, debug=False):
    # The screen belongs to curses while playing, so only a file gets the chatter
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG if debug else logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    else:
        logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.debug)

    settings = GameSettings()
    game = SnakeGame(settings, RandomFoodPlacer(seed=args.seed))

    try:
        with Terminal() as terminal:
            terminal.check_size(settings.width, settings.height)
            outcome = run_game(game, terminal, settings.tick_ms)
    except KeyboardInterrupt:
        print("\nGame interrupted by user.")
        return 0
    except TerminalError as e:
        logger.error("Terminal error: %s", e)
        return 1

    print("Game Over!")
    print(f"Scored {outcome.display_score} points!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
