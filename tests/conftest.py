from itertools import count
from typing import List, Tuple

import pytest

from txscope import IsolatedTransaction, PropagatedTransaction, Runner


class FakeConnection:
    def __init__(self, number: int, isolation_level: str):
        self.number = number
        self.isolation_level = isolation_level
        self.rows: List[str] = []

    def __repr__(self) -> str:
        return f"<FakeConnection {self.number}>"


class FakeRunner(Runner[FakeConnection]):
    def __init__(self):
        self.calls: List[Tuple[str, object]] = []
        self.committed: List[str] = []
        self.begin_error = None
        self.commit_error = None
        self.rollback_error = None
        self._numbers = count(1)

    async def begin(self, isolation_level="READ COMMITTED"):
        self.calls.append(("begin", isolation_level))
        if self.begin_error:
            raise self.begin_error
        return FakeConnection(next(self._numbers), isolation_level)

    async def commit(self, connection):
        self.calls.append(("commit", connection))
        if self.commit_error:
            raise self.commit_error
        self.committed.extend(connection.rows)

    async def rollback(self, connection):
        self.calls.append(("rollback", connection))
        if self.rollback_error:
            raise self.rollback_error

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def transaction(runner):
    return PropagatedTransaction(runner)


@pytest.fixture
def isolated(runner):
    return IsolatedTransaction(runner)
