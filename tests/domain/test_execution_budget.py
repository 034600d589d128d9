from adlinkcrawl.domain.execution_budget import ExecutionBudget


def test_budget_exhausted_once_remaining_below_buffer():
    now = [100.0]
    budget = ExecutionBudget(60, clock=lambda: now[0])
    assert budget.remaining_seconds() == 60
    assert not budget.is_exhausted(30)
    now[0] = 131.0
    assert budget.is_exhausted(30)
