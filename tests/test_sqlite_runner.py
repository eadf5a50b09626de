import pytest

aiosqlite = pytest.importorskip("aiosqlite")

from txscope import (  # noqa: E402
    IsolatedTransaction,
    IsolationLevel,
    PropagatedTransaction,
    SQLiteRunner,
)

USER = {"id": 1, "name": "Mykola", "surname": "Lysenko"}


@pytest.fixture
async def db_path(tmp_path):
    path = str(tmp_path / "test.db")
    async with aiosqlite.connect(path) as db:
        await db.execute(
            "CREATE TABLE user "
            "(id INTEGER PRIMARY KEY, name TEXT, surname TEXT)"
        )
        await db.commit()
    return path


@pytest.fixture
def sqlite_runner(db_path):
    return SQLiteRunner(db_path)


async def select_user(db_path, user_id):
    async with aiosqlite.connect(db_path) as db:
        db.row_factory = aiosqlite.Row
        cursor = await db.execute(
            "SELECT id, name, surname FROM user WHERE id = ?", (user_id,)
        )
        row = await cursor.fetchone()
    return dict(row) if row else None


async def insert_user(connection):
    await connection.execute(
        "INSERT INTO user (id, name, surname) VALUES (:id, :name, :surname)",
        USER,
    )


async def test_create_user(db_path, sqlite_runner):
    transaction = PropagatedTransaction(sqlite_runner)

    await transaction.run(lambda: insert_user(transaction.connection))

    assert await select_user(db_path, USER["id"]) == USER


async def test_rollback_after_error(db_path, sqlite_runner):
    transaction = PropagatedTransaction(sqlite_runner)
    error = RuntimeError("Internal error")

    async def callback():
        await insert_user(transaction.connection)
        raise error

    with pytest.raises(RuntimeError) as exc_info:
        await transaction.run(callback)

    assert exc_info.value is error
    assert await select_user(db_path, USER["id"]) is None


async def test_nested_transaction_reuses_connection(db_path, sqlite_runner):
    transaction = PropagatedTransaction(sqlite_runner)

    async def nested(user_id):
        async def callback():
            cursor = await transaction.connection.execute(
                "SELECT id, name, surname FROM user WHERE id = ?", (user_id,)
            )
            return dict(await cursor.fetchone())

        return await transaction.run(callback)

    async def callback():
        await insert_user(transaction.connection)
        return await nested(USER["id"])

    result = await transaction.run(callback)

    assert result == USER
    assert await select_user(db_path, USER["id"]) == USER


async def test_uncommitted_work_is_invisible_outside(db_path, sqlite_runner):
    transaction = PropagatedTransaction(sqlite_runner)

    async def callback():
        await insert_user(transaction.connection)
        return await select_user(db_path, USER["id"])

    assert await transaction.run(callback) is None
    assert await select_user(db_path, USER["id"]) == USER


@pytest.mark.parametrize("level", list(IsolationLevel))
async def test_isolation_levels(db_path, sqlite_runner, level):
    transaction = PropagatedTransaction(sqlite_runner)

    await transaction.run(
        lambda: insert_user(transaction.connection), level
    )

    assert await select_user(db_path, USER["id"]) == USER


async def test_isolated_commit(db_path, sqlite_runner):
    transaction = IsolatedTransaction(sqlite_runner)
    connection = await transaction.start()

    async def callback():
        await insert_user(transaction.connection)
        await transaction.commit()

    await transaction.run(connection, callback)

    assert await select_user(db_path, USER["id"]) == USER


async def test_isolated_rollback(db_path, sqlite_runner):
    transaction = IsolatedTransaction(sqlite_runner)
    connection = await transaction.start()

    async def callback():
        await insert_user(transaction.connection)
        await transaction.rollback()

    await transaction.run(connection, callback)

    assert await select_user(db_path, USER["id"]) is None
