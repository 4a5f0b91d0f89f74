from __future__ import annotations

from dataclasses import dataclass

from .bonds_core import BondDrillSession, CheckEvent


@dataclass(frozen=True, slots=True)
class DrillSummary:
    """In-memory tally of a drill session.

    Built from the check log, so it only covers checks where a digit was
    selected.
    """

    seed: int | None
    problems_seen: int
    solved: int
    checks: int
    correct_checks: int
    first_try_solves: int
    accuracy: float
    mean_solve_ms: float | None
    median_solve_ms: float | None

    events: list[CheckEvent]


def drill_summary_from_session(session: BondDrillSession) -> DrillSummary:
    """Build a DrillSummary from a (possibly still running) drill session."""

    events = session.events()
    checks = len(events)
    correct_checks = sum(1 for e in events if e.is_correct)
    accuracy = 0.0 if checks == 0 else correct_checks / checks

    first_check: dict[int, CheckEvent] = {}
    solve_event: dict[int, CheckEvent] = {}
    for e in events:
        first_check.setdefault(e.problem_index, e)
        if e.is_correct:
            solve_event.setdefault(e.problem_index, e)
    first_try = sum(1 for e in first_check.values() if e.is_correct)

    solve_ms = sorted(int(round(e.response_time_s * 1000.0)) for e in solve_event.values())

    mean_ms: float | None
    median_ms: float | None
    if not solve_ms:
        mean_ms = None
        median_ms = None
    else:
        mean_ms = float(sum(solve_ms)) / float(len(solve_ms))
        mid = len(solve_ms) // 2
        if len(solve_ms) % 2 == 1:
            median_ms = float(solve_ms[mid])
        else:
            median_ms = float(solve_ms[mid - 1] + solve_ms[mid]) / 2.0

    return DrillSummary(
        seed=session.seed,
        problems_seen=session.state.problem_index + 1,
        solved=len(solve_event),
        checks=checks,
        correct_checks=correct_checks,
        first_try_solves=first_try,
        accuracy=float(accuracy),
        mean_solve_ms=mean_ms,
        median_solve_ms=median_ms,
        events=events,
    )
