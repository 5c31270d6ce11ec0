import curses
import logging
import os
import signal
import sys
import threading
import traceback

from hozumi.config import resolve_config
from hozumi.renderer import AnimationStopped, GridRenderer, GridSurface, ScrollingSurface
from hozumi.sequencer import Sequencer

logger = logging.getLogger('hozumi')

# How often the input loop looks for a key press
POLL_INTERVAL = 0.05


def setup_logging(log_file):
    if not log_file:
        logger.addHandler(logging.NullHandler())
        return
    # stdout is the drawing surface, so the log goes to a file
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def sigterm_handler(signum, frame):
    raise KeyboardInterrupt


def play_scrolling(config, surface=None):
    surface = surface or ScrollingSurface.for_terminal()
    try:
        Sequencer(config, surface).run()
    except KeyboardInterrupt:
        logger.info("Interrupted, restoring terminal colors")
    finally:
        surface.close()


def render_loop(config, surface):
    try:
        Sequencer(config, surface).run()
    except AnimationStopped:
        logger.debug("Render loop stopped")
    except Exception as e:
        logger.critical(f"Render loop crashed: {str(e)}\n{traceback.format_exc()}")
        surface.stop.set()


def play_fixed(screen, config):
    """Drive the grid from a render thread; any key or resize ends it."""
    renderer = GridRenderer(screen)
    surface = GridSurface(renderer)
    screen.nodelay(True)

    writer = threading.Thread(target=render_loop, args=(config, surface), daemon=True)
    writer.start()
    try:
        while not surface.stop.is_set():
            with renderer.lock:
                key = screen.getch()
            if key == curses.KEY_RESIZE:
                logger.info("Terminal resized, shutting down")
                break
            if key != -1:
                logger.info(f"Key {key} pressed, shutting down")
                break
            surface.stop.wait(POLL_INTERVAL)
    finally:
        surface.close()
        writer.join()


def main(argv=None):
    config = resolve_config(argv)
    setup_logging(config.log_file)

    logger.info(f"Python Version: {sys.version}")
    logger.info(f"Platform: {sys.platform}")
    logger.info(f"Working Directory: {os.getcwd()}")
    mode = 'graphical' if config.graphical else 'fixed' if config.fixed else 'scrolling'
    logger.info(
        f"Starting {mode} mode at {config.timing.tier} speed "
        f"with {len(config.contents)} row(s), cool={config.cool}, parallel={config.parallel}"
    )

    signal.signal(signal.SIGTERM, sigterm_handler)

    if not config.fixed:
        play_scrolling(config)
        return

    try:
        curses.wrapper(play_fixed, config)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except curses.error as e:
        logger.critical(f"Fatal error: {str(e)}\n{traceback.format_exc()}")
        sys.stderr.write(f"hozumi: cannot initialize the terminal: {e}\n")
        sys.exit(1)
