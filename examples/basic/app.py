import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import aiosqlite

from txscope import (
    IsolationLevel,
    PropagatedTransaction,
    Rollback,
    SQLiteRunner,
)

DB_PATH = "bank.db"

transaction = PropagatedTransaction(SQLiteRunner(DB_PATH))


@dataclass
class Account:
    id: int
    owner: str
    balance: int


async def select_account(account_id: int) -> Optional[Account]:
    cursor = await transaction.require_connection().execute(
        "SELECT id, owner, balance FROM account WHERE id = ?", (account_id,)
    )
    row = await cursor.fetchone()
    return Account(**dict(row)) if row else None


@transaction.transactional
async def add_to_balance(account_id: int, amount: int) -> None:
    await transaction.connection.execute(
        "UPDATE account SET balance = balance + ? WHERE id = ?",
        (amount, account_id),
    )


@transaction.transactional(isolation_level=IsolationLevel.SERIALIZABLE)
async def transfer(source: int, target: int, amount: int):
    account = await select_account(source)
    if account is None or account.balance < amount:
        return Rollback("insufficient funds")
    await add_to_balance(source, -amount)
    await add_to_balance(target, amount)
    return "ok"


async def setup():
    async with aiosqlite.connect(DB_PATH) as db:
        await db.execute("DROP TABLE IF EXISTS account")
        await db.execute(
            "CREATE TABLE account "
            "(id INTEGER PRIMARY KEY, owner TEXT, balance INTEGER)"
        )
        await db.executemany(
            "INSERT INTO account (id, owner, balance) VALUES (?, ?, ?)",
            [(1, "alice", 100), (2, "bob", 0)],
        )
        await db.commit()


async def run():
    await setup()
    print(await transfer(1, 2, 60))
    print(await transfer(1, 2, 60))
    print(await transaction.run(lambda: select_account(2)))


logging.basicConfig(level=logging.DEBUG)
asyncio.run(run())
