"""
Tests for the thread-safe runtime wrapper
"""
import logging
import threading

import pytest
from hornlog import LogicRuntime, LogicEngine, HornlogConfig, FeatureDisabledError, LogicError
from hornlog.config import RuntimeConfig


@pytest.fixture
def runtime():
    runtime = LogicRuntime()
    runtime.initialize()
    yield runtime
    runtime.shutdown()


class TestLifecycle:
    """Test runtime initialization and shutdown"""

    def test_not_initialized_by_default(self):
        runtime = LogicRuntime()
        assert not runtime.initialized
        with pytest.raises(LogicError, match="not initialized"):
            runtime.solve_query("p(X)")

    def test_context_manager(self):
        with LogicRuntime() as runtime:
            assert runtime.initialized
            runtime.assert_fact("p(a).")
            assert runtime.solve_query("p(X)") == [{"X": "a"}]
        assert not runtime.initialized
        assert runtime.stats().facts_count == 0

    def test_wraps_given_engine(self):
        engine = LogicEngine()
        runtime = LogicRuntime(engine=engine)
        runtime.initialize()
        runtime.assert_fact("p(a).")
        assert engine.facts_count() == 1
        assert engine.initialized

    def test_log_settings_applied(self, tmp_path):
        log_file = tmp_path / "runtime.log"
        package = logging.getLogger("hornlog")
        engine_logger = logging.getLogger("hornlog.engine")
        names = ("hornlog.engine", "hornlog.runtime", "hornlog.evaluator")
        saved = {name: logging.getLogger(name).level for name in names}
        config = HornlogConfig(log_level="INFO", log_file=str(log_file))
        try:
            with LogicRuntime(config) as runtime:
                assert engine_logger.level == logging.INFO
                runtime.assert_fact("p(a).")
            assert not any(getattr(handler, "baseFilename", None) == str(log_file)
                           for handler in package.handlers)
        finally:
            for name, level in saved.items():
                logging.getLogger(name).setLevel(level)
        assert "Logic runtime initialized" in log_file.read_text()

    def test_independent_runtimes(self):
        with LogicRuntime() as first, LogicRuntime() as second:
            first.assert_fact("p(a).")
            assert second.solve_query("p(X)") == []


class TestDisabled:
    """Test the enable_logic switch"""

    def setup_method(self):
        config = HornlogConfig(runtime=RuntimeConfig(enable_logic=False))
        self.runtime = LogicRuntime(config)
        self.runtime.initialize()

    def test_operations_refused(self):
        with pytest.raises(FeatureDisabledError, match="Logic programming is disabled"):
            self.runtime.assert_fact("p(a).")
        with pytest.raises(FeatureDisabledError):
            self.runtime.solve_query("p(X)")
        with pytest.raises(FeatureDisabledError):
            self.runtime.add_rule("q(X) :- p(X).")

    def test_stats_still_available(self):
        stats = self.runtime.stats()
        assert stats.initialized
        assert stats.facts_count == 0


class TestOperations:

    def test_full_cycle(self, runtime):
        runtime.assert_facts(["parent(john, mary).", "parent(mary, susan)."])
        runtime.add_rule("grandparent(X, Z) :- parent(X, Y), parent(Y, Z).")
        assert runtime.solve_query("grandparent(john, Z)") == [{"Z": "susan"}]
        assert runtime.retract_fact("parent(mary, susan).") == 1
        assert runtime.solve_query("grandparent(john, Z)") == []

    def test_consult(self, runtime):
        runtime.consult("a(1). a(2). b(X) :- a(X).")
        assert len(runtime.solve_query("b(X)")) == 2

    def test_stats(self, runtime):
        runtime.consult("a(1). b(X) :- a(X).")
        runtime.solve_query("b(X)")
        stats = runtime.stats()
        assert stats.facts_count == 1
        assert stats.rules_count == 1
        assert stats.queries_executed == 1
        assert stats.initialized


class TestConcurrency:
    """Test concurrent access from several threads"""

    def test_concurrent_asserts_and_queries(self, runtime):
        errors = []

        def worker(n):
            try:
                for i in range(20):
                    runtime.assert_fact(f"item(t{n}, {i}).")
                    runtime.solve_query(f"item(t{n}, X)")
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        stats = runtime.stats()
        assert stats.facts_count == 160
        assert stats.queries_executed == 160
        assert len(runtime.solve_query("item(t3, X)")) == 20
