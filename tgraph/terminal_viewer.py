"""
Curses-based live graph viewer.

The viewer runs a single loop on the main thread: each iteration handles a
key press, polls the source file for appended lines and redraws the chart
once the refresh interval has elapsed. Appends and renders therefore never
overlap, and nothing is drawn after the session stops.
"""

import curses
import logging
import time
from typing import Optional

from tgraph.core.exceptions import RenderSurfaceError
from tgraph.services.session import ViewerConfig, ViewerSession

logger = logging.getLogger(__name__)

SHORTCUTS = "[R] Reload  [C] Clear  [L] Style  [M] Memory/CPU  [Q] Quit"

# Key codes that end the viewer: q, Q and Ctrl+C.
QUIT_KEYS = (ord("q"), ord("Q"), 3)


def handle_key(session: ViewerSession, ch: int, stdscr=None) -> bool:
    """
    Apply a single key press to the session.

    Args:
        session: Live viewer session.
        ch: Key code from getch(); -1 means no key.
        stdscr: Screen to wipe on clear, if any.

    Returns:
        False when the viewer should exit, True otherwise.
    """
    if ch in QUIT_KEYS:
        return False
    if ch < 0:
        return True

    key = chr(ch).lower() if ch < 256 else ""
    if key == "r":
        logger.info("Reloading graph data")
        session.reload()
    elif key == "c":
        if stdscr is not None:
            stdscr.clear()
        session.reload()
    elif key == "l":
        style = session.cycle_style()
        logger.info(f"Style switched to {style.value}")
    elif key == "m":
        metric = session.toggle_metric_group()
        logger.info(f"Metric switched to {metric.value}")
    return True


def draw(stdscr, session: ViewerSession) -> None:
    """Redraw the full chart for the current terminal size."""
    h, w = stdscr.getmaxyx()
    # Title, rule, axis, time axis, blank, legend, info and shortcuts.
    height = max(2, min(session.config.chart_height, h - 9))
    text = session.render(w - 1, height)

    stdscr.erase()
    for row, line in enumerate(text.splitlines() + [SHORTCUTS]):
        if row >= h:
            break
        try:
            stdscr.addstr(row, 0, line[: max(0, w - 1)])
        except curses.error:
            # Writing the bottom-right cell raises after the text is drawn.
            pass
    stdscr.refresh()


def run_viewer(stdscr, session: ViewerSession, poll_interval: float = 0.05) -> None:
    """
    Run the interactive viewer until the user quits.

    Args:
        stdscr: The curses standard screen (provided by curses.wrapper).
        session: Session to display; started here if not live yet.
        poll_interval: Seconds to sleep between loop iterations.
    """
    try:
        curses.curs_set(0)
    except curses.error:
        logger.debug("Terminal does not support hiding the cursor")
    stdscr.nodelay(True)

    if not session.is_live:
        session.start()

    refresh = session.config.refresh_rate_ms / 1000
    last_render = 0.0
    running = True

    try:
        while running:
            running = handle_key(session, stdscr.getch(), stdscr)
            if not running:
                break

            session.poll()

            now = time.monotonic()
            if now - last_render >= refresh:
                draw(stdscr, session)
                last_render = now

            time.sleep(min(poll_interval, refresh))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        session.stop()


def view(config: ViewerConfig, log_path: Optional[str] = None) -> int:
    """
    Open the terminal viewer for a configuration.

    Args:
        config: Viewer configuration.
        log_path: File that receives diagnostic logs while curses owns
            the screen; logs are dropped if omitted.

    Returns:
        Process exit code.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    if log_path:
        handler = logging.FileHandler(log_path)
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        root.addHandler(handler)
    else:
        root.addHandler(logging.NullHandler())

    session = ViewerSession(config)
    try:
        curses.wrapper(run_viewer, session)
    except curses.error as e:
        raise RenderSurfaceError(f"Cannot open terminal: {str(e)}")
    finally:
        session.stop()
    return 0
