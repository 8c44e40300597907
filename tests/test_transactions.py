import pytest
from sqlalchemy.orm.exc import StaleDataError

from laundry_service.core.database import TransientConflictError, is_transient_error, run_in_transaction
from laundry_service.core.errors import CancellationNotAllowed


class RecordingSession:
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    async def commit(self):
        self.commits += 1

    async def rollback(self):
        self.rollbacks += 1


def test_transient_error_classification():
    assert is_transient_error(TransientConflictError("order number taken"))
    assert is_transient_error(StaleDataError("version mismatch"))
    assert not is_transient_error(CancellationNotAllowed("PROCESSING"))
    assert not is_transient_error(ValueError("boom"))


@pytest.mark.asyncio
async def test_transient_conflict_is_replayed():
    session = RecordingSession()
    attempts = []

    async def operation():
        attempts.append(1)
        if len(attempts) < 3:
            raise StaleDataError("concurrent update")
        return "done"

    result = await run_in_transaction(session, operation, max_retries=3)

    assert result == "done"
    assert len(attempts) == 3
    assert session.rollbacks == 2
    assert session.commits == 1


@pytest.mark.asyncio
async def test_retries_are_bounded():
    session = RecordingSession()

    async def operation():
        raise TransientConflictError("always loses")

    with pytest.raises(TransientConflictError):
        await run_in_transaction(session, operation, max_retries=2)

    assert session.rollbacks == 2
    assert session.commits == 0


@pytest.mark.asyncio
async def test_domain_errors_are_not_retried():
    session = RecordingSession()
    attempts = []

    async def operation():
        attempts.append(1)
        raise CancellationNotAllowed("READY")

    with pytest.raises(CancellationNotAllowed):
        await run_in_transaction(session, operation)

    assert len(attempts) == 1
    assert session.rollbacks == 1
