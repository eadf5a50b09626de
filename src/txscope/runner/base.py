from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Optional, Tuple, TypeVar
from urllib.parse import quote, unquote, urlparse

from txscope.exception import TransactionError
from txscope.isolation import DEFAULT_ISOLATION_LEVEL

C = TypeVar("C")

DEFAULT_PORTS = {"postgres": 5432, "mysql": 3306}


class Runner(ABC, Generic[C]):
    """The begin/commit/rollback contract a transaction controller drives.

    The connection returned by ``begin`` is opaque to the controller: it is
    only stored, handed to business code, and given back to ``commit`` or
    ``rollback``. Exactly one of those two is called per connection.
    """

    @abstractmethod
    async def begin(
        self, isolation_level: str = DEFAULT_ISOLATION_LEVEL.value
    ) -> C: ...

    @abstractmethod
    async def commit(self, connection: C) -> None: ...

    @abstractmethod
    async def rollback(self, connection: C) -> None: ...


class PoolRunner(Runner[C]):
    """Shared configuration for runners backed by a connection pool.

    Settings come from a DSN, from keyword arguments, or both; keyword
    arguments win, and a host cannot be given alongside a DSN.
    Unset parts are left out of the connection string, except the host,
    which falls back to ``localhost``, and the port, which falls back to
    the scheme's default.
    """

    scheme = "dummy"

    @abstractmethod
    def _setup_pool(self): ...

    @abstractmethod
    async def open(self): ...

    @abstractmethod
    async def close(self): ...

    def __init__(
        self,
        dsn: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        db: Optional[str] = None,
        query: Optional[str] = None,
        min_size: int = 1,
        max_size: Optional[int] = None,
    ) -> None:
        """Runner initialization.

        Args:
            dsn (str, optional): DB data source name
            host (str, optional): DB address URL or IP. Defaults to
                `localhost`
            port (int, optional): DB port. Defaults to the scheme's port
            user (str, optional): DB user
            password (str, optional): DB password
            db (str, optional): DB name
            query (str, optional): DB query parameters. Defaults to None
            min_size (int, optional): Minimum pool size. Defaults to 1
            max_size (int, optional): Maximum pool size. Defaults to None
        """
        if dsn:
            if host:
                raise TransactionError(
                    "Cannot connect to DB using host and dsn"
                )
            parts = urlparse(dsn)
            try:
                port = port or parts.port
            except ValueError as e:
                raise TransactionError(f"Invalid port in dsn: {e}") from e
            host = parts.hostname
            user = user or unquote(parts.username or "") or None
            password = password or unquote(parts.password or "") or None
            db = db or parts.path.lstrip("/") or None
            query = query or parts.query or None

        if port is not None and (
            not isinstance(port, int)
            or isinstance(port, bool)
            or port not in range(0, 65536)
        ):
            raise TransactionError(
                "port: must be an integer between 0 and 65535"
            )
        if host is not None and (
            not isinstance(host, str) or not len(host) > 0
        ):
            raise TransactionError(
                "host: must be a string at least 1 character long"
            )
        if password is not None and (
            not isinstance(password, str) or not len(password) > 0
        ):
            raise TransactionError(
                "password: must be a string at least 1 character long"
            )

        self.host = host or "localhost"
        self.port = port or DEFAULT_PORTS.get(self.scheme)
        self.user = user
        self.password = password
        self.db = db
        self.query = query
        self.min_size = min_size
        self.max_size = max_size
        self.dsn, self.full_dsn = self._build_dsn()
        self._setup_pool()

    def __str__(self) -> str:
        return f"<{self.__class__.__name__} {self.dsn}>"

    async def __aenter__(self):
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    def _build_dsn(self) -> Tuple[str, str]:
        """Connection strings with the password masked and in full"""

        def build(password: Optional[str]) -> str:
            auth = ""
            if self.user or password:
                auth = quote(self.user or "", safe="")
                if password:
                    auth += f":{password}"
                auth += "@"
            location = self.host
            if self.port:
                location += f":{self.port}"
            path = f"/{self.db}" if self.db else ""
            return f"{self.scheme}://{auth}{location}{path}"

        masked = build("..." if self.password else None)
        full = build(
            quote(self.password, safe="") if self.password else None
        )
        if self.query:
            full += f"?{self.query}"
        return masked, full
