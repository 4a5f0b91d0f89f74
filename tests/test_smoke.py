"""Smoke tests for the pygame UI.

These tests verify that the application's main loop can initialise and
execute a handful of frames without crashing when the SDL dummy video
driver is used.  They do not attempt to check rendering correctness.
"""

from __future__ import annotations

import os

# Use the dummy drivers before importing pygame or the application
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")


def test_app_runs_headless() -> None:
    """Ensure the application can start and run a few frames headlessly."""
    # Import inside the test so that environment variables take effect
    from number_bonds.app import run

    exit_code = run(max_frames=3)
    assert exit_code == 0


def test_ui_smoke_open_drill_answer_and_leave(monkeypatch) -> None:
    monkeypatch.setenv("NUMBER_BONDS_SEED", "5")

    import pygame

    from number_bonds.app import run

    def key(k: int, unicode: str = "") -> None:
        pygame.event.post(pygame.event.Event(pygame.KEYDOWN, {"key": k, "unicode": unicode}))

    def inject(frame: int) -> None:
        # Main Menu -> Start drill -> pick 3 -> check -> Esc (summary) -> any key
        if frame == 1:
            key(pygame.K_RETURN)
        elif frame == 2:
            key(pygame.K_3, "3")
        elif frame == 3:
            key(pygame.K_RETURN)
        elif frame == 4:
            key(pygame.K_ESCAPE)
        elif frame == 5:
            key(pygame.K_SPACE, " ")

    assert run(max_frames=10, event_injector=inject) == 0


def test_configure_logging_falls_back_on_unknown_level(monkeypatch) -> None:
    import sys

    from loguru import logger

    from number_bonds.__main__ import configure_logging

    monkeypatch.setenv("NUMBER_BONDS_LOG_LEVEL", "verbose")
    try:
        assert configure_logging() == "WARNING"

        monkeypatch.setenv("NUMBER_BONDS_LOG_LEVEL", "debug")
        assert configure_logging() == "DEBUG"

        monkeypatch.delenv("NUMBER_BONDS_LOG_LEVEL")
        assert configure_logging() == "WARNING"
    finally:
        logger.remove()
        logger.add(sys.stderr)
