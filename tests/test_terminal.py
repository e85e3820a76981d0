import curses
import os
from unittest.mock import MagicMock, patch

import pytest

from snakegame.core import QUIT, Cell, Direction
from snakegame.terminal import KEY_ESCAPE, Terminal, TerminalError, translate_key


@pytest.fixture
def mock_curses():
    with patch("snakegame.terminal.curses") as mocked:
        mocked.error = curses.error
        mocked.has_colors.return_value = False
        screen = MagicMock()
        screen.getmaxyx.return_value = (24, 80)
        mocked.initscr.return_value = screen
        yield mocked


@pytest.fixture
def screen(mock_curses):
    return mock_curses.initscr.return_value


@pytest.mark.parametrize("key, expected", [
    (curses.KEY_UP, Direction.UP),
    (curses.KEY_DOWN, Direction.DOWN),
    (curses.KEY_LEFT, Direction.LEFT),
    (curses.KEY_RIGHT, Direction.RIGHT),
    (KEY_ESCAPE, QUIT),
    (ord("q"), None),
    (ord("w"), None),
    (ord(" "), None),
])
def test_translate_key(key, expected):
    assert translate_key(key) == expected


def test_session_enters_and_restores_raw_mode(mock_curses, screen):
    with Terminal() as terminal:
        assert terminal.stdscr is screen
        mock_curses.noecho.assert_called_once()
        mock_curses.cbreak.assert_called_once()
        screen.keypad.assert_called_once_with(True)

    screen.keypad.assert_called_with(False)
    mock_curses.echo.assert_called_once()
    mock_curses.nocbreak.assert_called_once()
    mock_curses.endwin.assert_called_once()
    assert terminal.stdscr is None


def test_session_restores_on_error(mock_curses):
    with pytest.raises(RuntimeError):
        with Terminal():
            raise RuntimeError("boom")

    mock_curses.endwin.assert_called_once()


def test_session_restores_on_keyboard_interrupt(mock_curses):
    with pytest.raises(KeyboardInterrupt):
        with Terminal():
            raise KeyboardInterrupt

    mock_curses.endwin.assert_called_once()


def test_failed_initscr_is_fatal(mock_curses):
    mock_curses.initscr.side_effect = curses.error("no terminal")

    with pytest.raises(TerminalError):
        with Terminal():
            pass

    mock_curses.endwin.assert_not_called()


def test_failed_cbreak_still_restores(mock_curses):
    mock_curses.cbreak.side_effect = curses.error("cbreak")

    with pytest.raises(TerminalError):
        Terminal().__enter__()

    mock_curses.endwin.assert_called_once()


def test_hidden_cursor_is_optional(mock_curses):
    mock_curses.curs_set.side_effect = curses.error("unsupported")

    with Terminal() as terminal:
        assert terminal.stdscr is not None


def test_draw_failure_is_fatal_and_restores(mock_curses, screen):
    screen.addstr.side_effect = curses.error("addstr")

    with pytest.raises(TerminalError):
        with Terminal() as terminal:
            terminal.draw_cell(0, 0, Cell.BORDER)

    mock_curses.endwin.assert_called_once()


def test_draw_cell_uses_glyphs(mock_curses, screen):
    with Terminal() as terminal:
        terminal.draw_cell(3, 4, Cell.FOOD)
        terminal.draw_cell(0, 0, Cell.BORDER)
        terminal.draw_cell(1, 1, Cell.HEAD)

    screen.addstr.assert_any_call(4, 3, "*", 0)
    screen.addstr.assert_any_call(0, 0, "#", 0)
    screen.addstr.assert_any_call(1, 1, "@", 0)


def test_colors_when_available(mock_curses, screen):
    mock_curses.has_colors.return_value = True
    mock_curses.color_pair.side_effect = lambda pair: pair * 256

    with Terminal() as terminal:
        assert terminal.colors is True
        terminal.draw_cell(2, 2, Cell.BODY)

    assert mock_curses.init_pair.call_count == 4
    screen.addstr.assert_called_with(2, 2, "O", 256)


def test_status_line_goes_below_board(mock_curses, screen):
    with Terminal() as terminal:
        terminal.check_size(28, 20)
        terminal.draw_status("Score: 4")

    screen.addstr.assert_called_with(20, 0, "Score: 4", 0)


def test_too_small_terminal(mock_curses, screen):
    screen.getmaxyx.return_value = (15, 80)

    with pytest.raises(TerminalError, match="too small"):
        with Terminal() as terminal:
            terminal.check_size(28, 20)

    mock_curses.endwin.assert_called_once()


def test_get_input_timeout(mock_curses, screen):
    screen.getch.return_value = -1

    with Terminal() as terminal:
        assert terminal.get_input(40) is None

    screen.timeout.assert_called_with(40)


def test_get_input_maps_keys(mock_curses, screen):
    screen.getch.side_effect = [curses.KEY_LEFT, KEY_ESCAPE, ord("z")]

    with Terminal() as terminal:
        assert terminal.get_input(10) == Direction.LEFT
        assert terminal.get_input(10) == QUIT
        assert terminal.get_input(10) is None


def test_use_outside_session_fails():
    with pytest.raises(TerminalError):
        Terminal().refresh()


def test_failed_keypad_reset_still_ends_curses(mock_curses, screen):
    screen.keypad.side_effect = [None, curses.error("keypad")]

    with pytest.raises(TerminalError, match="keypad"):
        with Terminal():
            pass

    mock_curses.echo.assert_called_once()
    mock_curses.nocbreak.assert_called_once()
    mock_curses.endwin.assert_called_once()


def test_first_restore_error_is_reported(mock_curses):
    mock_curses.echo.side_effect = curses.error("echo")
    mock_curses.endwin.side_effect = curses.error("endwin")

    with pytest.raises(TerminalError, match="echo"):
        with Terminal():
            pass

    mock_curses.nocbreak.assert_called_once()
    mock_curses.endwin.assert_called_once()


def test_start_failure_wins_over_restore_failure(mock_curses):
    mock_curses.cbreak.side_effect = curses.error("cbreak")
    mock_curses.echo.side_effect = curses.error("echo")

    with pytest.raises(TerminalError, match="Could not enter raw terminal mode: cbreak"):
        Terminal().__enter__()

    mock_curses.endwin.assert_called_once()


def test_escape_delay_set_without_touching_environment(mock_curses, monkeypatch):
    monkeypatch.delenv("ESCDELAY", raising=False)

    with Terminal():
        pass

    mock_curses.set_escdelay.assert_called_once_with(25)
    assert "ESCDELAY" not in os.environ


def test_rejected_escape_delay_is_not_fatal(mock_curses):
    mock_curses.set_escdelay.side_effect = curses.error("escdelay")

    with Terminal() as terminal:
        assert terminal.stdscr is not None
