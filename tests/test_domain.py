from __future__ import annotations

import pytest

from encounter_reports.domain import Job, Phase, ReportRequest, RunState


def test_report_request_keeps_first_seen_order_without_duplicates():
    request = ReportRequest.from_ids(["e2", "e1", "e2", "e3", "e1"])

    assert request.encounter_ids == ("e2", "e1", "e3")
    assert len(request) == 3


@pytest.mark.parametrize("ids", [[], ["e1", ""], ["  "], ["e1", None]])
def test_report_request_rejects_empty_or_blank_ids(ids):
    with pytest.raises(ValueError):
        ReportRequest.from_ids(ids)


def test_report_request_is_immutable():
    request = ReportRequest.from_ids(["e1"])
    with pytest.raises(AttributeError):
        request.encounter_ids = ("e2",)


def _state() -> RunState:
    return RunState(request=ReportRequest.from_ids(["e1"]))


def test_phases_only_move_forward():
    state = _state()
    state.advance(Phase.SUBMITTING)
    state.advance(Phase.POLLING)

    with pytest.raises(RuntimeError):
        state.advance(Phase.SUBMITTING)

    # Phases can be skipped forward
    state.advance(Phase.DELIVERING)
    assert state.phase is Phase.DELIVERING


@pytest.mark.parametrize("terminal", [Phase.SUCCEEDED, Phase.FAILED, Phase.CANCELLED])
def test_terminal_phases_are_sinks(terminal):
    state = _state()
    state.advance(Phase.SUBMITTING)
    state.advance(terminal)

    for phase in Phase:
        with pytest.raises(RuntimeError):
            state.advance(phase)


def test_job_is_attached_once():
    state = _state()
    state.attach_job(Job(id="j1"))

    with pytest.raises(RuntimeError):
        state.attach_job(Job(id="j2"))
    assert state.job.id == "j1"


def test_attempts_only_count_while_polling():
    state = _state()
    with pytest.raises(RuntimeError):
        state.record_attempt()

    state.advance(Phase.SUBMITTING)
    state.advance(Phase.POLLING)
    state.record_attempt()
    state.record_attempt()
    state.advance(Phase.FETCHING)

    with pytest.raises(RuntimeError):
        state.record_attempt()
    assert state.attempts == 2
