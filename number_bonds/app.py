"""Pygame UI shell for the Number Bonds trainer.

The shell is a small screen stack: a main menu, the drill screen and a
session summary.  Problem generation, answer checking and the phase machine
live in number_bonds/bonds_core.py; screens here only render snapshots and
forward learner intents.
"""

from __future__ import annotations

import os
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

import pygame
from loguru import logger

from .bonds_core import BondDrillSession, DrillSnapshot, build_bond_drill
from .clock import Clock, RealClock
from .results import DrillSummary, drill_summary_from_session

SEED_ENV = "NUMBER_BONDS_SEED"

WINDOW_SIZE = (960, 540)
TARGET_FPS = 60

BG = (214, 228, 250)
CARD_BG = (255, 255, 255)
CARD_BORDER = (180, 196, 228)
TEXT_MAIN = (40, 52, 72)
TEXT_MUTED = (110, 122, 140)
TITLE = (3, 105, 161)
GIVEN_BOX = (186, 230, 253)
GIVEN_TEXT = (7, 89, 133)
TARGET_BOX = (251, 207, 232)
TARGET_TEXT = (157, 23, 77)
ACTIVE_RING = (236, 72, 153)
SOLVED_RING = (74, 222, 128)
DIGIT_BG = (59, 130, 246)
DIGIT_SELECTED = (236, 72, 153)
DISABLED_BG = (203, 213, 225)
DISABLED_TEXT = (100, 116, 139)
CLEAR_BG = (239, 68, 68)
CHECK_BG = (34, 197, 94)
NEXT_BG = (168, 85, 247)
OK_BANNER = (220, 252, 231)
OK_TEXT = (21, 128, 61)
BAD_BANNER = (254, 226, 226)
BAD_TEXT = (185, 28, 28)


class Screen(Protocol):
    def handle_event(self, event: pygame.event.Event) -> None: ...
    def render(self, surface: pygame.Surface) -> None: ...


@dataclass(frozen=True, slots=True)
class MenuItem:
    label: str
    action: Callable[[], None]


class App:
    def __init__(self, surface: pygame.Surface, font: pygame.font.Font) -> None:
        self._surface = surface
        self._font = font
        self._screens: list[Screen] = []
        self._running = True

    @property
    def running(self) -> bool:
        return self._running

    @property
    def font(self) -> pygame.font.Font:
        return self._font

    @property
    def top(self) -> Screen | None:
        return self._screens[-1] if self._screens else None

    def push(self, screen: Screen) -> None:
        self._screens.append(screen)

    def pop(self) -> None:
        # Never pop the last/root screen; root handles its own quit/back behavior.
        if len(self._screens) > 1:
            self._screens.pop()

    def replace(self, screen: Screen) -> None:
        self.pop()
        self.push(screen)

    def quit(self) -> None:
        self._running = False

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            self.quit()
            return
        if not self._screens:
            return
        self._screens[-1].handle_event(event)

    def render(self) -> None:
        if not self._screens:
            return
        self._screens[-1].render(self._surface)


class MenuScreen:
    def __init__(self, app: App, title: str, items: list[MenuItem], *, is_root: bool = False) -> None:
        self._app = app
        self._title = title
        self._items = items
        self._selected = 0
        self._is_root = is_root
        self._title_font = pygame.font.Font(None, 56)
        self._item_font = pygame.font.Font(None, 36)
        self._hint_font = pygame.font.Font(None, 22)

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key)
            return

        if event.type == pygame.JOYHATMOTION:
            _, y = event.value
            if y == 1:
                self._move(-1)
            elif y == -1:
                self._move(1)
            return

        if event.type == pygame.JOYBUTTONDOWN:
            # Common mapping: 0 = select, 1 = back/cancel.
            if event.button == 0:
                self._activate()
            elif event.button == 1:
                self._back()

    def _handle_key(self, key: int) -> None:
        if key in (pygame.K_UP, pygame.K_w):
            self._move(-1)
        elif key in (pygame.K_DOWN, pygame.K_s):
            self._move(1)
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._activate()
        elif key == pygame.K_ESCAPE:
            # Backspace is reserved for Clear on the drill screen.
            self._back()

    def _move(self, delta: int) -> None:
        if not self._items:
            return
        self._selected = (self._selected + delta) % len(self._items)

    def _activate(self) -> None:
        if not self._items:
            return
        self._items[self._selected].action()

    def _back(self) -> None:
        if self._is_root:
            self._app.quit()
        else:
            self._app.pop()

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)

        card = _card_rect(w, h)
        pygame.draw.rect(surface, CARD_BG, card, border_radius=18)
        pygame.draw.rect(surface, CARD_BORDER, card, 2, border_radius=18)

        title = self._title_font.render(self._title, True, TITLE)
        surface.blit(title, title.get_rect(midtop=(card.centerx, card.y + 36)))

        row_w = min(360, card.w - 80)
        row_h = 52
        gap = 14
        total_h = len(self._items) * row_h + max(0, len(self._items) - 1) * gap
        y = card.centery - total_h // 2 + 20
        for idx, item in enumerate(self._items):
            row = pygame.Rect(card.centerx - row_w // 2, y, row_w, row_h)
            selected = idx == self._selected
            pygame.draw.rect(surface, DIGIT_BG if selected else DISABLED_BG, row, border_radius=12)
            color = (255, 255, 255) if selected else TEXT_MAIN
            text = self._item_font.render(item.label, True, color)
            surface.blit(text, text.get_rect(center=row.center))
            y += row_h + gap

        footer = "Enter/Space: Select  |  Esc: Back  |  D-pad + Button0/1"
        foot = self._hint_font.render(footer, True, TEXT_MUTED)
        surface.blit(foot, foot.get_rect(midbottom=(card.centerx, card.bottom - 14)))


class BondDrillScreen:
    """Renders one drill session and turns input into intents.

    Keys: 0-9 choose a digit, T chooses 10, Backspace/Delete clear,
    Enter/Space check (or go to the next problem once solved), Esc leaves.
    Mouse clicks work on every button; hitboxes are refreshed each render.
    """

    def __init__(self, app: App, *, session_factory: Callable[[], BondDrillSession]) -> None:
        self._app = app
        self._session = session_factory()

        self._title_font = pygame.font.Font(None, 60)
        self._prompt_font = pygame.font.Font(None, 38)
        self._box_font = pygame.font.Font(None, 84)
        self._digit_font = pygame.font.Font(None, 40)
        self._button_font = pygame.font.Font(None, 36)
        self._small_font = pygame.font.Font(None, 24)

        self._digit_hitboxes: dict[int, pygame.Rect] = {}
        self._button_hitboxes: dict[str, pygame.Rect] = {}

    @property
    def session(self) -> BondDrillSession:
        return self._session

    def handle_event(self, event: pygame.event.Event) -> None:
        snap = self._session.snapshot()

        if event.type == pygame.KEYDOWN:
            self._handle_key(event.key, getattr(event, "unicode", "") or "", snap)
            return

        if event.type == pygame.MOUSEBUTTONDOWN and getattr(event, "button", 1) == 1:
            self._handle_click(event.pos, snap)
            return

        if event.type == pygame.JOYHATMOTION:
            x, _ = event.value
            if x != 0:
                self._step_digit(x, snap)
            return

        if event.type == pygame.JOYBUTTONDOWN:
            if event.button == 0:
                self._primary_action(snap)
            elif event.button == 1:
                self._leave()

    def _handle_key(self, key: int, unicode: str, snap: DrillSnapshot) -> None:
        if key == pygame.K_ESCAPE:
            self._leave()
            return
        if key in (pygame.K_RETURN, pygame.K_KP_ENTER, pygame.K_SPACE):
            self._primary_action(snap)
            return
        if key in (pygame.K_BACKSPACE, pygame.K_DELETE):
            # The clear button is hidden once solved.
            if not snap.accepted:
                self._session.clear()
            return
        if key in (pygame.K_LEFT, pygame.K_RIGHT):
            self._step_digit(-1 if key == pygame.K_LEFT else 1, snap)
            return

        digit: int | None = None
        if len(unicode) == 1 and unicode in "0123456789":
            digit = int(unicode)
        elif unicode.lower() == "t" or key == pygame.K_t:
            digit = 10
        if digit is not None and snap.digit_enabled(digit):
            self._session.choose_digit(digit)

    def _handle_click(self, pos: tuple[int, int], snap: DrillSnapshot) -> None:
        for digit, rect in self._digit_hitboxes.items():
            if rect.collidepoint(pos):
                if snap.digit_enabled(digit):
                    self._session.choose_digit(digit)
                return
        for name, rect in self._button_hitboxes.items():
            if not rect.collidepoint(pos):
                continue
            if name == "clear" and not snap.accepted:
                self._session.clear()
            elif name == "check" and snap.can_check:
                self._session.check_answer()
            elif name == "next" and snap.accepted:
                self._session.next_problem()
            return

    def _primary_action(self, snap: DrillSnapshot) -> None:
        if snap.accepted:
            self._session.next_problem()
        else:
            self._session.check_answer()

    def _step_digit(self, delta: int, snap: DrillSnapshot) -> None:
        if snap.accepted:
            return
        palette = snap.digit_palette
        if snap.selected is None:
            idx = 0 if delta > 0 else len(palette) - 1
        else:
            idx = (palette.index(snap.selected) + delta) % len(palette)
        self._session.choose_digit(palette[idx])

    def _leave(self) -> None:
        summary = drill_summary_from_session(self._session)
        logger.debug(
            "Leaving drill: solved={} checks={} seed={}",
            summary.solved,
            summary.checks,
            summary.seed,
        )
        if summary.checks == 0:
            self._app.pop()
            return
        self._app.replace(SummaryScreen(self._app, summary=summary))

    # -- Rendering ----------------------------------------------------------
    def render(self, surface: pygame.Surface) -> None:
        snap = self._session.snapshot()
        w, h = surface.get_size()
        surface.fill(BG)

        card = _card_rect(w, h)
        pygame.draw.rect(surface, CARD_BG, card, border_radius=18)
        pygame.draw.rect(surface, CARD_BORDER, card, 2, border_radius=18)

        title = self._title_font.render(snap.title, True, TITLE)
        surface.blit(title, title.get_rect(midtop=(card.centerx, card.y + 14)))

        tally = self._small_font.render(f"Solved: {snap.solved}   Checks: {snap.checks}", True, TEXT_MUTED)
        surface.blit(tally, tally.get_rect(topright=(card.right - 16, card.y + 12)))

        prompt_color = OK_TEXT if snap.accepted else TEXT_MAIN
        prompt = self._prompt_font.render(snap.prompt, True, prompt_color)
        surface.blit(prompt, prompt.get_rect(midtop=(card.centerx, card.y + 66)))

        y = self._render_operands(surface, snap, card, card.y + 104)
        y = self._render_feedback(surface, snap, card, y + 10)
        if not snap.accepted:
            y = self._render_palette(surface, snap, card, y + 8)
        else:
            self._digit_hitboxes = {}
        self._render_buttons(surface, snap, card, y + 12)

        hint = self._small_font.render(snap.hint, True, TEXT_MUTED)
        surface.blit(hint, hint.get_rect(midbottom=(card.centerx, card.bottom - 10)))

    def _render_operands(self, surface: pygame.Surface, snap: DrillSnapshot, card: pygame.Rect, top: int) -> int:
        box = 92
        sign_w = 48
        total_w = box * 3 + sign_w * 2
        x = card.centerx - total_w // 2

        given_rect = pygame.Rect(x, top, box, box)
        selected_rect = pygame.Rect(x + box + sign_w, top, box, box)
        target_rect = pygame.Rect(x + (box + sign_w) * 2, top, box, box)

        self._draw_box(surface, given_rect, str(snap.given), GIVEN_BOX, GIVEN_TEXT)
        shown = "?" if snap.selected is None else str(snap.selected)
        self._draw_box(surface, selected_rect, shown, GIVEN_BOX, GIVEN_TEXT)
        if snap.accepted:
            pygame.draw.rect(surface, SOLVED_RING, selected_rect.inflate(8, 8), 4, border_radius=16)
        else:
            pygame.draw.rect(surface, ACTIVE_RING, selected_rect.inflate(8, 8), 4, border_radius=16)
        self._draw_box(surface, target_rect, str(snap.target), TARGET_BOX, TARGET_TEXT)

        for sign, left in (("+", given_rect.right), ("=", selected_rect.right)):
            s = self._box_font.render(sign, True, TEXT_MUTED)
            surface.blit(s, s.get_rect(center=(left + sign_w // 2, given_rect.centery)))

        return given_rect.bottom

    def _draw_box(
        self,
        surface: pygame.Surface,
        rect: pygame.Rect,
        label: str,
        bg: tuple[int, int, int],
        fg: tuple[int, int, int],
    ) -> None:
        pygame.draw.rect(surface, bg, rect, border_radius=14)
        text = self._box_font.render(label, True, fg)
        surface.blit(text, text.get_rect(center=rect.center))

    def _render_feedback(self, surface: pygame.Surface, snap: DrillSnapshot, card: pygame.Rect, top: int) -> int:
        banner_h = 44
        fb = snap.feedback
        if fb is None:
            return top + banner_h

        bg, fg = (OK_BANNER, OK_TEXT) if fb.correct else (BAD_BANNER, BAD_TEXT)
        text = self._prompt_font.render(fb.text, True, fg)
        icon_d = 30
        banner_w = min(card.w - 40, text.get_width() + icon_d + 48)
        banner = pygame.Rect(card.centerx - banner_w // 2, top, banner_w, banner_h)
        pygame.draw.rect(surface, bg, banner, border_radius=10)

        icon_center = (banner.x + 16 + icon_d // 2, banner.centery)
        _draw_feedback_icon(surface, icon_center, icon_d // 2, correct=fb.correct)
        surface.blit(text, text.get_rect(midleft=(banner.x + 24 + icon_d, banner.centery)))
        return banner.bottom

    def _render_palette(self, surface: pygame.Surface, snap: DrillSnapshot, card: pygame.Rect, top: int) -> int:
        cols = 6
        cell_w, cell_h, gap = 64, 44, 10
        grid_w = cols * cell_w + (cols - 1) * gap
        left = card.centerx - grid_w // 2

        self._digit_hitboxes = {}
        bottom = top
        for i, digit in enumerate(snap.digit_palette):
            r, c = divmod(i, cols)
            rect = pygame.Rect(left + c * (cell_w + gap), top + r * (cell_h + gap), cell_w, cell_h)
            selected = digit == snap.selected
            if selected:
                bg, fg = DIGIT_SELECTED, (255, 255, 255)
            elif snap.digit_enabled(digit):
                bg, fg = DIGIT_BG, (255, 255, 255)
            else:
                bg, fg = DISABLED_BG, DISABLED_TEXT
            pygame.draw.rect(surface, bg, rect, border_radius=10)
            label = self._digit_font.render(str(digit), True, fg)
            surface.blit(label, label.get_rect(center=rect.center))
            self._digit_hitboxes[digit] = rect
            bottom = rect.bottom
        return bottom

    def _render_buttons(self, surface: pygame.Surface, snap: DrillSnapshot, card: pygame.Rect, top: int) -> None:
        self._button_hitboxes = {}
        if snap.accepted:
            rect = pygame.Rect(0, top, 280, 50)
            rect.centerx = card.centerx
            self._draw_button(surface, rect, "Next problem!", NEXT_BG, enabled=True)
            self._button_hitboxes["next"] = rect
            return

        btn_w, btn_h, gap = 150, 46, 20
        clear_rect = pygame.Rect(card.centerx - btn_w - gap // 2, top, btn_w, btn_h)
        check_rect = pygame.Rect(card.centerx + gap // 2, top, btn_w, btn_h)
        self._draw_button(surface, clear_rect, "Clear", CLEAR_BG, enabled=True)
        self._draw_button(surface, check_rect, "Check", CHECK_BG, enabled=snap.can_check)
        self._button_hitboxes["clear"] = clear_rect
        self._button_hitboxes["check"] = check_rect

    def _draw_button(
        self,
        surface: pygame.Surface,
        rect: pygame.Rect,
        label: str,
        bg: tuple[int, int, int],
        *,
        enabled: bool,
    ) -> None:
        fill = bg if enabled else DISABLED_BG
        fg = (255, 255, 255) if enabled else DISABLED_TEXT
        pygame.draw.rect(surface, fill, rect, border_radius=12)
        text = self._button_font.render(label, True, fg)
        surface.blit(text, text.get_rect(center=rect.center))


class SummaryScreen:
    def __init__(self, app: App, *, summary: DrillSummary) -> None:
        self._app = app
        self._summary = summary
        self._title_font = pygame.font.Font(None, 56)

    @property
    def summary(self) -> DrillSummary:
        return self._summary

    def handle_event(self, event: pygame.event.Event) -> None:
        # Any key or button dismisses the summary.
        if event.type in (pygame.KEYDOWN, pygame.JOYBUTTONDOWN, pygame.MOUSEBUTTONDOWN):
            self._app.pop()

    def lines(self) -> list[str]:
        s = self._summary
        acc_pct = int(round(s.accuracy * 100))
        mean = "n/a" if s.mean_solve_ms is None else f"{s.mean_solve_ms / 1000.0:.1f}s"
        median = "n/a" if s.median_solve_ms is None else f"{s.median_solve_ms / 1000.0:.1f}s"
        return [
            f"Problems solved: {s.solved}",
            f"Solved on first try: {s.first_try_solves}",
            f"Checks: {s.checks}   Correct: {s.correct_checks}   Accuracy: {acc_pct}%",
            f"Time to solve: mean {mean}, median {median}",
            "",
            "Press any key to return to the menu",
        ]

    def render(self, surface: pygame.Surface) -> None:
        w, h = surface.get_size()
        surface.fill(BG)
        card = _card_rect(w, h)
        pygame.draw.rect(surface, CARD_BG, card, border_radius=18)
        pygame.draw.rect(surface, CARD_BORDER, card, 2, border_radius=18)

        title = self._title_font.render("Great practice!", True, TITLE)
        surface.blit(title, title.get_rect(midtop=(card.centerx, card.y + 36)))

        y = card.y + 120
        for line in self.lines():
            text = self._app.font.render(line, True, TEXT_MAIN)
            surface.blit(text, text.get_rect(midtop=(card.centerx, y)))
            y += 40


def _card_rect(w: int, h: int) -> pygame.Rect:
    margin = max(10, min(26, w // 34))
    return pygame.Rect(margin, margin, max(260, w - margin * 2), max(220, h - margin * 2))


def _draw_feedback_icon(
    surface: pygame.Surface,
    center: tuple[int, int],
    radius: int,
    *,
    correct: bool,
) -> None:
    cx, cy = center
    color = SOLVED_RING if correct else CLEAR_BG
    pygame.draw.circle(surface, color, center, radius)
    white = (255, 255, 255)
    r = radius // 2
    if correct:
        pygame.draw.lines(surface, white, False, [(cx - r, cy), (cx - r // 3, cy + r // 2 + 2), (cx + r, cy - r // 2)], 3)
    else:
        pygame.draw.line(surface, white, (cx - r, cy - r), (cx + r, cy + r), 3)
        pygame.draw.line(surface, white, (cx - r, cy + r), (cx + r, cy - r), 3)


def _init_joysticks() -> None:
    # Safe on platforms with no joystick support.
    try:
        count = pygame.joystick.get_count()
    except Exception:
        return

    for i in range(count):
        try:
            js = pygame.joystick.Joystick(i)
            js.init()
        except Exception:
            continue


def _new_seed() -> int:
    return random.SystemRandom().randint(1, 2**31 - 1)


def seed_from_env() -> int:
    """Seed from NUMBER_BONDS_SEED, or a fresh system-random seed."""

    raw = os.environ.get(SEED_ENV, "").strip()
    if raw:
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer {}={!r}", SEED_ENV, raw)
    return _new_seed()


def run(
    *,
    max_frames: int | None = None,
    event_injector: Callable[[int], None] | None = None,
    clock: Clock | None = None,
) -> int:
    pygame.init()
    _init_joysticks()

    pygame.display.set_caption("Number Bonds Trainer")
    surface = pygame.display.set_mode(WINDOW_SIZE, pygame.RESIZABLE)

    font = pygame.font.Font(None, 36)
    frame_clock = pygame.time.Clock()

    app = App(surface=surface, font=font)
    drill_clock: Clock = clock if clock is not None else RealClock()

    def open_drill() -> None:
        seed = seed_from_env()
        logger.debug("Opening drill with seed {}", seed)
        app.push(
            BondDrillScreen(
                app,
                session_factory=lambda: build_bond_drill(clock=drill_clock, seed=seed),
            )
        )

    main_items = [
        MenuItem("Start drill", open_drill),
        MenuItem("Quit", app.quit),
    ]

    app.push(MenuScreen(app, "Number Bonds", main_items, is_root=True))

    frame = 0
    try:
        while app.running:
            if event_injector is not None:
                event_injector(frame)

            for event in pygame.event.get():
                app.handle_event(event)

            app.render()

            pygame.display.flip()

            frame += 1
            if max_frames is not None and frame >= max_frames:
                break

            frame_clock.tick(TARGET_FPS)
    finally:
        pygame.quit()
        logger.info("Number Bonds trainer closed after {} frames", frame)

    return 0
