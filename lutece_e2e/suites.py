"""Phase ordering for the Lutece integration suite.

A suite is an immutable tuple of phase names. pytest collects the journey
classes (each marked ``@pytest.mark.phase(name)``) and ``order_items``
arranges them in suite order, then by the ``test_NN_`` number of each step.
``PhaseGate`` makes every phase after a failed one skip.
"""
from __future__ import annotations

import re
from typing import AbstractSet, Dict, Iterable, List, Optional, Sequence, Tuple

from lutece_e2e.bus import RUN_SUFFIX, PhaseBus
from lutece_e2e.config import generate_run_suffix

CONTAINER_SETUP = "container_setup"
RBAC_CONFIGURATION = "rbac_configuration"
WORKFLOW_CREATION = "workflow_creation"
FORMS_CREATION = "forms_creation"
FORMS_SUBMISSION = "forms_submission"
QUESTION_TEXT_LONG = "question_text_long"
RESPONSE_VALIDATION = "response_validation"

LOCAL_SUITE: Tuple[str, ...] = (
    RBAC_CONFIGURATION,
    WORKFLOW_CREATION,
    FORMS_CREATION,
    FORMS_SUBMISSION,
)
CONTAINER_SUITE: Tuple[str, ...] = (CONTAINER_SETUP,) + LOCAL_SUITE

# Not part of a canonical suite; run with --phase.
AD_HOC_PHASES: Tuple[str, ...] = (QUESTION_TEXT_LONG, RESPONSE_VALIDATION)

SUITES: Dict[str, Tuple[str, ...]] = {
    "local": LOCAL_SUITE,
    "container": CONTAINER_SUITE,
}
ALL_PHASES: Tuple[str, ...] = CONTAINER_SUITE + AD_HOC_PHASES

# Phases that create named fixtures; a run that includes one of them names
# them with a fresh suffix.
SUFFIX_PRODUCERS: Tuple[str, ...] = (RBAC_CONFIGURATION, WORKFLOW_CREATION)

# How a phase class opens its browsing context (class attribute ``session_mode``).
ANONYMOUS = "anonymous"
AUTHENTICATED = "authenticated"
SESSION_MODES: Tuple[str, ...] = (ANONYMOUS, AUTHENTICATED)

_STEP_NUMBER = re.compile(r"^test_(\d+)")
_UNNUMBERED = 10_000


def select_phases(suite: str = "local", phase: Optional[str] = None) -> Tuple[str, ...]:
    """Phases to run: a single ``phase`` if given, otherwise the named suite."""
    if phase:
        if phase not in ALL_PHASES:
            raise ValueError(f"Unknown phase '{phase}' (known: {', '.join(ALL_PHASES)})")
        return (phase,)
    try:
        return SUITES[suite]
    except KeyError:
        raise ValueError(f"Unknown suite '{suite}' (known: {', '.join(SUITES)})") from None


def phase_of(item) -> Optional[str]:
    marker = item.get_closest_marker("phase")
    if marker is None or not marker.args:
        return None
    return marker.args[0]


def step_number(test_name: str) -> int:
    match = _STEP_NUMBER.match(test_name)
    return int(match.group(1)) if match else _UNNUMBERED


def order_items(items: Iterable, phases: Sequence[str], include_unphased: bool = True) -> Tuple[List, List]:
    """
    Split collected tests into (selected, deselected).

    Selected phase tests come first in ``phases`` order, then by step number,
    keeping collection order for ties. Tests without a phase marker follow
    when ``include_unphased`` is set.

    Returns:
        (selected, deselected)
    """
    rank = {name: index for index, name in enumerate(phases)}
    phased: List[Tuple[int, int, int, object]] = []
    unphased: List = []
    deselected: List = []

    for position, item in enumerate(items):
        phase = phase_of(item)
        if phase is None:
            (unphased if include_unphased else deselected).append(item)
        elif phase in rank:
            phased.append((rank[phase], step_number(item.name), position, item))
        else:
            deselected.append(item)

    phased.sort(key=lambda entry: entry[:3])
    return [entry[3] for entry in phased] + unphased, deselected


class PhaseGate:
    """Records the first failed phase; every later phase is skipped."""

    def __init__(self, phases: Sequence[str]):
        self.phases = tuple(phases)
        self.failed_phase: Optional[str] = None

    def record_failure(self, phase: Optional[str]) -> None:
        if phase is None or self.failed_phase is not None:
            return
        self.failed_phase = phase

    def skip_reason(self, phase: Optional[str]) -> Optional[str]:
        """Reason to skip ``phase``, or None when it may run."""
        if phase is None or self.failed_phase is None or phase == self.failed_phase:
            return None
        if phase not in self.phases or self.failed_phase not in self.phases:
            return None
        if self.phases.index(phase) > self.phases.index(self.failed_phase):
            return f"phase '{self.failed_phase}' failed"
        return None


def resolve_run_suffix(bus: PhaseBus, collected_phases: AbstractSet[str], now_ms: Optional[int] = None) -> str:
    """
    Suffix for the names created by this run.

    A run that collects a producer phase generates and publishes a new
    suffix; any other run reuses the one published by the previous run.
    """
    if any(phase in collected_phases for phase in SUFFIX_PRODUCERS):
        suffix = generate_run_suffix(now_ms)
        bus.publish(RUN_SUFFIX.name, suffix)
        return suffix
    return bus.read(RUN_SUFFIX.name)
