import pytest

from fhevault.client import ApiError
from fhevault.workflow import (
    InvalidTransition,
    StrategyWorkflow,
    WorkflowError,
    WorkflowState,
)


def test_demo_strategy_end_to_end(api):
    seen = []
    workflow = StrategyWorkflow(api, on_change=seen.append)
    result = workflow.run(7, 75, 90)

    assert seen == [
        WorkflowState.ENCRYPTING,
        WorkflowState.SUBMITTING,
        WorkflowState.COMPUTING,
        WorkflowState.COMPLETED,
    ]
    assert workflow.state is WorkflowState.COMPLETED
    assert result.hash.startswith('0x') and len(result.hash) == 66

    report = workflow.decrypt()
    assert report.score == 84
    assert report.category == 'excellent'
    assert report.percentile == 95

    strategy = api.get(result.strategy_id)
    assert strategy['status'] == 'completed'
    assert strategy['encryptedHash'] == result.hash
    assert api.stats() == {'total': 1, 'completed': 1}
    assert len(api.list()) == 1


class BrokenComputeApi:
    def __init__(self, api):
        self.api = api

    def submit(self, *args):
        return self.api.submit(*args)

    def compute(self, strategy_id):
        raise ApiError(500, 'Failed to compute strategy score')


def test_stage_failure_resets_to_idle(api):
    seen = []
    workflow = StrategyWorkflow(BrokenComputeApi(api), on_change=seen.append)
    with pytest.raises(WorkflowError) as excinfo:
        workflow.run(7, 75, 90)
    assert excinfo.value.stage is WorkflowState.COMPUTING
    assert excinfo.value.notice == 'Computation failed'
    assert isinstance(excinfo.value.__cause__, ApiError)
    assert seen[-1] is WorkflowState.IDLE
    assert workflow.state is WorkflowState.IDLE
    assert workflow.result is None
    # the submit stage still reached the server
    assert api.stats()['total'] == 1


def test_rejected_submission_surfaces_notice(api):
    class LyingApi:
        def submit(self, risk_level, allocation, timeframe, data, digest):
            return api.submit(risk_level, allocation, timeframe, '', digest)

        def compute(self, strategy_id):
            raise AssertionError('never reached')

    workflow = StrategyWorkflow(LyingApi())
    with pytest.raises(WorkflowError) as excinfo:
        workflow.run(7, 75, 90)
    assert excinfo.value.stage is WorkflowState.SUBMITTING
    assert excinfo.value.__cause__.status_code == 400
    assert workflow.state is WorkflowState.IDLE


def test_invalid_input_never_leaves_idle(api):
    seen = []
    workflow = StrategyWorkflow(api, on_change=seen.append)
    with pytest.raises(WorkflowError):
        workflow.run(11, 75, 90)
    assert seen == []
    assert workflow.state is WorkflowState.IDLE
    assert api.stats()['total'] == 0


def test_decrypt_requires_completed(api):
    workflow = StrategyWorkflow(api)
    with pytest.raises(InvalidTransition):
        workflow.decrypt()


def test_transitions_are_linear(api):
    workflow = StrategyWorkflow(api)
    for expected in ('encrypting', 'submitting', 'computing', 'completed'):
        assert workflow.advance().value == expected
    with pytest.raises(InvalidTransition):
        workflow.advance()
    workflow.reset()
    assert workflow.state is WorkflowState.IDLE


def test_second_run_starts_from_idle(api):
    workflow = StrategyWorkflow(api)
    first = workflow.run(7, 75, 90)
    second = workflow.run(1, 0, 1)
    assert first.strategy_id != second.strategy_id
    assert workflow.decrypt().score == 30
    assert workflow.decrypt().category == 'poor'


def test_api_client_raises_on_not_found(api):
    with pytest.raises(ApiError) as excinfo:
        api.get('missing')
    assert excinfo.value.status_code == 404
    assert excinfo.value.message == 'Strategy not found'
