"""Deterministic core logic for the Number Bonds drill.

The learner is shown a target number and one addend and must pick the missing
addend from a fixed palette of digits.  This module holds everything that
decides *what* happens in a drill and nothing that decides how it looks: it
has no dependency on pygame so it can be exercised headlessly.

The core concepts include:

* ``BondProblem`` and ``BondProblemGenerator`` producing bounded random
  problems that always have a solution inside the palette.
* ``DrillState``, an immutable value holding the live problem, the learner's
  selection, the answer phase and the last feedback.
* The intents ``ChooseDigit``, ``Clear``, ``CheckAnswer`` and ``NextProblem``
  and the pure transition function :func:`apply`.
* ``BondDrillSession`` which owns one state, forwards intents to
  :func:`apply`, keeps the check log and hands out ``DrillSnapshot`` view
  models for the UI.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from enum import Enum

from .clock import Clock

MIN_TARGET_NUMBER = 3
MAX_TARGET_NUMBER = 10
DIGIT_PALETTE: tuple[int, ...] = tuple(range(MAX_TARGET_NUMBER + 1))


class Phase(str, Enum):
    SELECTING = "selecting"
    REJECTED = "rejected"
    ACCEPTED = "accepted"


class FeedbackKind(str, Enum):
    MISSING = "missing"
    CORRECT = "correct"
    INCORRECT = "incorrect"


FEEDBACK_TEXT: dict[FeedbackKind, str] = {
    FeedbackKind.MISSING: "Pick the missing number!",
    FeedbackKind.CORRECT: "Correct! Well done!",
    FeedbackKind.INCORRECT: "Not quite... try again!",
}


@dataclass(frozen=True, slots=True)
class Feedback:
    kind: FeedbackKind
    text: str
    correct: bool

    @classmethod
    def of(cls, kind: FeedbackKind) -> "Feedback":
        return cls(kind=kind, text=FEEDBACK_TEXT[kind], correct=kind is FeedbackKind.CORRECT)


@dataclass(frozen=True, slots=True)
class BondProblem:
    """A single "what goes with ``given`` to make ``target``" problem."""

    target: int
    given: int

    def __post_init__(self) -> None:
        if not (MIN_TARGET_NUMBER <= self.target <= MAX_TARGET_NUMBER):
            raise ValueError(f"target must be in [{MIN_TARGET_NUMBER}, {MAX_TARGET_NUMBER}]")
        if not (0 <= self.given <= self.target):
            raise ValueError("given must be in [0, target]")

    @property
    def answer(self) -> int:
        return self.target - self.given

    def is_solved_by(self, selected: int) -> bool:
        return self.given + selected == self.target


class BondProblemGenerator:
    """Draws problems uniformly from the allowed ranges.

    The target is drawn from ``[MIN_TARGET_NUMBER, MAX_TARGET_NUMBER]`` and the
    given addend from ``[0, target]``, so the missing addend is always a
    palette digit.  Passing a seed makes the stream reproducible.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def next_problem(self) -> BondProblem:
        target = self._rng.randint(MIN_TARGET_NUMBER, MAX_TARGET_NUMBER)
        given = self._rng.randint(0, target)
        return BondProblem(target=target, given=given)


# -- Intents ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ChooseDigit:
    digit: int


@dataclass(frozen=True, slots=True)
class Clear:
    pass


@dataclass(frozen=True, slots=True)
class CheckAnswer:
    pass


@dataclass(frozen=True, slots=True)
class NextProblem:
    pass


Intent = ChooseDigit | Clear | CheckAnswer | NextProblem


# -- State machine ------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DrillState:
    problem: BondProblem
    selected: int | None = None
    phase: Phase = Phase.SELECTING
    feedback: Feedback | None = None
    problem_index: int = 0

    @classmethod
    def fresh(cls, problem: BondProblem, *, problem_index: int = 0) -> "DrillState":
        return cls(problem=problem, problem_index=problem_index)


def validate_digit(digit: int) -> int:
    if isinstance(digit, bool) or not isinstance(digit, int) or digit not in DIGIT_PALETTE:
        raise ValueError(f"digit must be an int in [{DIGIT_PALETTE[0]}, {DIGIT_PALETTE[-1]}]")
    return digit


def apply(state: DrillState, intent: Intent, *, generator: BondProblemGenerator) -> DrillState:
    """Return the state that results from ``intent``.

    Intents that are not valid in the current phase return ``state``
    unchanged.  Only ``NextProblem`` touches the generator.
    """

    if isinstance(intent, ChooseDigit):
        digit = validate_digit(intent.digit)
        if state.phase is Phase.ACCEPTED:
            return state
        return replace(state, selected=digit, phase=Phase.SELECTING, feedback=None)

    if isinstance(intent, Clear):
        return replace(state, selected=None, phase=Phase.SELECTING, feedback=None)

    if isinstance(intent, CheckAnswer):
        if state.phase is Phase.ACCEPTED:
            return state
        if state.selected is None:
            # Stays correctable: no move to REJECTED on a missing selection.
            return replace(state, feedback=Feedback.of(FeedbackKind.MISSING))
        if state.problem.is_solved_by(state.selected):
            return replace(state, phase=Phase.ACCEPTED, feedback=Feedback.of(FeedbackKind.CORRECT))
        return replace(state, phase=Phase.REJECTED, feedback=Feedback.of(FeedbackKind.INCORRECT))

    if isinstance(intent, NextProblem):
        if state.phase is not Phase.ACCEPTED:
            return state
        return DrillState.fresh(generator.next_problem(), problem_index=state.problem_index + 1)

    raise TypeError(f"unknown intent: {intent!r}")


# -- Session ------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CheckEvent:
    """One evaluated check (a check with a selection made)."""

    index: int
    problem_index: int
    target: int
    given: int
    selected: int
    is_correct: bool
    presented_at_s: float
    answered_at_s: float
    response_time_s: float


@dataclass(frozen=True, slots=True)
class DrillSnapshot:
    """View model for the UI (pure data)."""

    title: str
    target: int
    given: int
    selected: int | None
    phase: Phase
    feedback: Feedback | None
    digit_palette: tuple[int, ...]
    prompt: str
    hint: str
    solved: int
    checks: int

    @property
    def accepted(self) -> bool:
        return self.phase is Phase.ACCEPTED

    @property
    def can_check(self) -> bool:
        return not self.accepted and self.selected is not None

    def digit_enabled(self, digit: int) -> bool:
        return not self.accepted and digit != self.selected


class BondDrillSession:
    """Session controller: one live problem, driven by learner intents.

    - Problems come from the injected generator (seeded or not).
    - Time is entirely via the injected Clock and is used only for the
      check log.
    """

    title = "Number Bonds"
    hint = "Hint: pick the number that fits in the ? box."

    def __init__(
        self,
        *,
        clock: Clock,
        seed: int | None = None,
        generator: BondProblemGenerator | None = None,
    ) -> None:
        self._clock = clock
        self._seed = seed
        self._generator = generator if generator is not None else BondProblemGenerator(seed)

        self._state = DrillState.fresh(self._generator.next_problem())
        self._presented_at_s = self._clock.now()
        self._events: list[CheckEvent] = []
        self._solved = 0

    @property
    def seed(self) -> int | None:
        return self._seed

    @property
    def state(self) -> DrillState:
        return self._state

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def solved(self) -> int:
        return self._solved

    def events(self) -> list[CheckEvent]:
        return list(self._events)

    def dispatch(self, intent: Intent) -> DrillState:
        before = self._state
        after = apply(before, intent, generator=self._generator)

        if isinstance(intent, CheckAnswer) and before.phase is not Phase.ACCEPTED and before.selected is not None:
            self._record_check(before, after)

        if after.problem_index != before.problem_index:
            self._presented_at_s = self._clock.now()

        self._state = after
        return after

    def choose_digit(self, digit: int) -> DrillState:
        return self.dispatch(ChooseDigit(digit))

    def clear(self) -> DrillState:
        return self.dispatch(Clear())

    def check_answer(self) -> DrillState:
        return self.dispatch(CheckAnswer())

    def next_problem(self) -> DrillState:
        return self.dispatch(NextProblem())

    def current_prompt(self) -> str:
        s = self._state
        p = s.problem
        if s.phase is Phase.ACCEPTED and s.selected is not None:
            return f"{p.given} and {s.selected} make {p.target}. Great job!"
        return f"What goes with {p.given} to make {p.target}?"

    def snapshot(self) -> DrillSnapshot:
        s = self._state
        return DrillSnapshot(
            title=self.title,
            target=s.problem.target,
            given=s.problem.given,
            selected=s.selected,
            phase=s.phase,
            feedback=s.feedback,
            digit_palette=DIGIT_PALETTE,
            prompt=self.current_prompt(),
            hint=self.hint,
            solved=self._solved,
            checks=len(self._events),
        )

    def _record_check(self, before: DrillState, after: DrillState) -> None:
        assert before.selected is not None
        answered_at_s = self._clock.now()
        is_correct = after.phase is Phase.ACCEPTED
        self._events.append(
            CheckEvent(
                index=len(self._events),
                problem_index=before.problem_index,
                target=before.problem.target,
                given=before.problem.given,
                selected=before.selected,
                is_correct=is_correct,
                presented_at_s=self._presented_at_s,
                answered_at_s=answered_at_s,
                response_time_s=max(0.0, answered_at_s - self._presented_at_s),
            )
        )
        if is_correct:
            # Clear can reopen an accepted problem; count each problem once.
            self._solved = len({e.problem_index for e in self._events if e.is_correct})


def build_bond_drill(*, clock: Clock, seed: int | None = None) -> BondDrillSession:
    """Factory for a Number Bonds drill session."""

    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ValueError("seed must be an int or None")
    return BondDrillSession(clock=clock, seed=seed)
