import pytest

from txscope import IsolationLevel, TransactionError


@pytest.mark.parametrize(
    "value,expected",
    (
        (IsolationLevel.SERIALIZABLE, IsolationLevel.SERIALIZABLE),
        ("READ UNCOMMITTED", IsolationLevel.READ_UNCOMMITTED),
        ("read committed", IsolationLevel.READ_COMMITTED),
        ("REPEATABLE_READ", IsolationLevel.REPEATABLE_READ),
        ("  serializable ", IsolationLevel.SERIALIZABLE),
    ),
)
def test_parse(value, expected):
    assert IsolationLevel.parse(value) is expected


@pytest.mark.parametrize("value", ("SNAPSHOT", "", None, 4))
def test_parse_unknown(value):
    with pytest.raises(TransactionError):
        IsolationLevel.parse(value)


def test_sql_values():
    assert [level.value for level in IsolationLevel] == [
        "READ UNCOMMITTED",
        "READ COMMITTED",
        "REPEATABLE READ",
        "SERIALIZABLE",
    ]
