"""
Thread-safe runtime wrapper for hornlog

A LogicRuntime owns exactly one LogicEngine and serialises every operation
on it behind a lock. There is no process-wide instance: whoever builds the
runtime passes it to the code that needs it, and calls initialize() and
shutdown() explicitly (or uses it as a context manager).

A query holds the lock for its whole duration. There is no timeout or
cancellation; max_depth is the only bound on a runaway search.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import HornlogConfig
from .engine import LogicEngine
from .errors import FeatureDisabledError, LogicError
from .logging_config import configure_logging
from .types import QueryResult

logger = logging.getLogger(__name__)


@dataclass
class RuntimeStats:
    """Snapshot of the engine counters"""
    facts_count: int
    rules_count: int
    queries_executed: int
    initialized: bool


class LogicRuntime:
    """
    Explicit owner of one logic engine, shared between threads.
    """

    def __init__(self, config: Optional[HornlogConfig] = None,
                 engine: Optional[LogicEngine] = None):
        """
        Args:
            config: Configuration; the engine's own config if an engine is given
            engine: Engine to wrap; a new one is built from config if None
        """
        if engine is None:
            engine = LogicEngine(config)
        self.config = config or engine.config
        self._engine = engine
        self._lock = threading.Lock()
        self._log_handler: Optional[logging.Handler] = None
        self._initialized = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        with self._lock:
            if self._log_handler is None:
                self._log_handler = configure_logging(self.config)
            if self.config.runtime.enable_logic:
                self._engine.initialize()
            self._initialized = True
            logger.info("Logic runtime initialized (logic %s)",
                        "enabled" if self.config.runtime.enable_logic else "disabled")

    def shutdown(self) -> None:
        with self._lock:
            if self.config.runtime.enable_logic:
                self._engine.shutdown()
            self._initialized = False
            logger.info("Logic runtime shut down")
            if self._log_handler is not None:
                logging.getLogger("hornlog").removeHandler(self._log_handler)
                self._log_handler.close()
                self._log_handler = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    def __enter__(self) -> "LogicRuntime":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Logic operations
    # ------------------------------------------------------------------

    def assert_fact(self, fact: str) -> None:
        with self._lock:
            self._ready()
            self._engine.assert_fact(fact)

    def assert_facts(self, facts: Iterable[str]) -> None:
        with self._lock:
            self._ready()
            self._engine.assert_facts(facts)

    def retract_fact(self, fact: str) -> int:
        with self._lock:
            self._ready()
            return self._engine.retract_fact(fact)

    def add_rule(self, rule: str) -> None:
        with self._lock:
            self._ready()
            self._engine.add_rule(rule)

    def consult(self, program: str) -> None:
        with self._lock:
            self._ready()
            self._engine.consult(program)

    def solve_query(self, query: str) -> QueryResult:
        with self._lock:
            self._ready()
            return self._engine.solve_query(query)

    def stats(self) -> RuntimeStats:
        with self._lock:
            return RuntimeStats(
                facts_count=self._engine.facts_count(),
                rules_count=self._engine.rules_count(),
                queries_executed=self._engine.queries_executed(),
                initialized=self._initialized,
            )

    def _ready(self) -> None:
        """Must be called with the lock held"""
        if not self.config.runtime.enable_logic:
            raise FeatureDisabledError()
        if not self._initialized:
            raise LogicError("Logic runtime is not initialized")
