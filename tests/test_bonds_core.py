"""Tests for the deterministic number bonds core.

These unit tests exercise the problem generator and the pure transition
function ``apply``.  They avoid any dependency on pygame.
"""

from __future__ import annotations

import pytest

from number_bonds.bonds_core import (
    DIGIT_PALETTE,
    MAX_TARGET_NUMBER,
    MIN_TARGET_NUMBER,
    BondProblem,
    BondProblemGenerator,
    CheckAnswer,
    ChooseDigit,
    Clear,
    DrillState,
    FeedbackKind,
    NextProblem,
    Phase,
    apply,
)


class ScriptedGenerator(BondProblemGenerator):
    def __init__(self, problems: list[tuple[int, int]]) -> None:
        super().__init__(seed=0)
        self._queue = [BondProblem(target=t, given=g) for t, g in problems]

    def next_problem(self) -> BondProblem:
        return self._queue.pop(0)


def _state(target: int, given: int) -> DrillState:
    return DrillState.fresh(BondProblem(target=target, given=given))


def _run(state: DrillState, *intents, generator: BondProblemGenerator | None = None) -> DrillState:
    gen = generator if generator is not None else BondProblemGenerator(seed=1)
    for intent in intents:
        state = apply(state, intent, generator=gen)
    return state


def test_digit_palette_is_zero_to_ten() -> None:
    assert DIGIT_PALETTE == tuple(range(11))


def test_generator_bounds_and_solvability() -> None:
    gen = BondProblemGenerator(seed=2024)
    targets = set()
    for _ in range(2000):
        p = gen.next_problem()
        assert MIN_TARGET_NUMBER <= p.target <= MAX_TARGET_NUMBER
        assert 0 <= p.given <= p.target
        assert p.answer in DIGIT_PALETTE
        assert p.given + p.answer == p.target
        targets.add(p.target)
    assert targets == set(range(MIN_TARGET_NUMBER, MAX_TARGET_NUMBER + 1))


def test_generator_determinism_same_seed_same_sequence() -> None:
    g1 = BondProblemGenerator(seed=123)
    g2 = BondProblemGenerator(seed=123)
    assert [g1.next_problem() for _ in range(50)] == [g2.next_problem() for _ in range(50)]


@pytest.mark.parametrize(
    ("target", "given"),
    [(2, 0), (11, 3), (5, -1), (5, 6)],
)
def test_problem_rejects_out_of_range_values(target: int, given: int) -> None:
    with pytest.raises(ValueError):
        BondProblem(target=target, given=given)


def test_check_accepts_iff_sum_matches_for_all_triples() -> None:
    for target in range(MIN_TARGET_NUMBER, MAX_TARGET_NUMBER + 1):
        for given in range(0, target + 1):
            for selected in DIGIT_PALETTE:
                s = _run(_state(target, given), ChooseDigit(selected), CheckAnswer())
                assert s.feedback is not None
                if given + selected == target:
                    assert s.phase is Phase.ACCEPTED
                    assert s.feedback.correct is True
                else:
                    assert s.phase is Phase.REJECTED
                    assert s.feedback.correct is False


def test_scenario_correct_answer_is_accepted() -> None:
    s = _run(_state(7, 3), ChooseDigit(4), CheckAnswer())
    assert s.phase is Phase.ACCEPTED
    assert s.selected == 4
    assert s.feedback is not None and s.feedback.correct is True
    assert s.feedback.kind is FeedbackKind.CORRECT


def test_scenario_wrong_answer_is_rejected() -> None:
    s = _run(_state(7, 3), ChooseDigit(2), CheckAnswer())
    assert s.phase is Phase.REJECTED
    assert s.selected == 2
    assert s.feedback is not None and s.feedback.correct is False
    assert s.feedback.kind is FeedbackKind.INCORRECT


def test_scenario_check_without_selection_keeps_phase() -> None:
    s = _run(_state(5, 2), CheckAnswer())
    assert s.phase is Phase.SELECTING
    assert s.selected is None
    assert s.feedback is not None
    assert s.feedback.correct is False
    assert s.feedback.kind is FeedbackKind.MISSING
    assert "missing number" in s.feedback.text


def test_check_without_selection_after_rejection_stays_rejected() -> None:
    start = _run(_state(5, 2), ChooseDigit(1), CheckAnswer())
    assert start.phase is Phase.REJECTED
    no_selection = DrillState(problem=start.problem, selected=None, phase=Phase.REJECTED)
    s = _run(no_selection, CheckAnswer())
    assert s.phase is Phase.REJECTED
    assert s.feedback is not None and s.feedback.kind is FeedbackKind.MISSING


def test_repeated_check_from_rejected_stays_rejected() -> None:
    rejected = _run(_state(7, 3), ChooseDigit(2), CheckAnswer())
    again = _run(rejected, CheckAnswer())
    assert again.phase is Phase.REJECTED
    assert again.selected == 2
    assert again.feedback == rejected.feedback


def test_choose_after_rejection_returns_to_selecting_and_clears_feedback() -> None:
    s = _run(_state(7, 3), ChooseDigit(2), CheckAnswer(), ChooseDigit(5))
    assert s.phase is Phase.SELECTING
    assert s.selected == 5
    assert s.feedback is None


def test_clear_is_idempotent() -> None:
    base = _run(_state(6, 1), ChooseDigit(3), CheckAnswer())
    once = _run(base, Clear())
    twice = _run(base, Clear(), Clear())
    assert once == twice
    assert once.selected is None
    assert once.feedback is None
    assert once.phase is Phase.SELECTING
    assert once.problem == base.problem


def test_accepted_lock_ignores_choose_and_check() -> None:
    accepted = _run(_state(7, 3), ChooseDigit(4), CheckAnswer())
    assert accepted.phase is Phase.ACCEPTED

    after = _run(accepted, ChooseDigit(9), CheckAnswer(), ChooseDigit(0))
    assert after is accepted
    assert after.problem == BondProblem(target=7, given=3)


def test_next_problem_only_from_accepted() -> None:
    gen = ScriptedGenerator([(9, 9)])
    selecting = _state(7, 3)
    assert _run(selecting, NextProblem(), generator=gen) is selecting

    rejected = _run(selecting, ChooseDigit(1), CheckAnswer())
    assert _run(rejected, NextProblem(), generator=gen) is rejected


def test_next_problem_resets_state_with_fresh_problem() -> None:
    gen = ScriptedGenerator([(4, 1)])
    accepted = _run(_state(7, 3), ChooseDigit(4), CheckAnswer())

    s = _run(accepted, NextProblem(), generator=gen)
    assert s.problem == BondProblem(target=4, given=1)
    assert s.selected is None
    assert s.feedback is None
    assert s.phase is Phase.SELECTING
    assert s.problem_index == accepted.problem_index + 1


def test_clear_from_accepted_reopens_same_problem() -> None:
    accepted = _run(_state(7, 3), ChooseDigit(4), CheckAnswer())
    s = _run(accepted, Clear())
    assert s.phase is Phase.SELECTING
    assert s.problem == accepted.problem
    assert s.selected is None


@pytest.mark.parametrize("digit", [-1, 11, True, 3.0, "3"])
def test_choose_rejects_digits_outside_palette(digit: object) -> None:
    with pytest.raises(ValueError):
        _run(_state(7, 3), ChooseDigit(digit))  # type: ignore[arg-type]


def test_unknown_intent_raises_type_error() -> None:
    with pytest.raises(TypeError):
        _run(_state(7, 3), object())  # type: ignore[arg-type]
