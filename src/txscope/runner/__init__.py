from .base import PoolRunner, Runner
from .mysql import MysqlRunner
from .postgres import PostgresRunner
from .sqlite import SQLiteRunner

__all__ = (
    "Runner",
    "PoolRunner",
    "MysqlRunner",
    "PostgresRunner",
    "SQLiteRunner",
)
