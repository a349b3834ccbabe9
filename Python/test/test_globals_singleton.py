"""
Tests for global singletons (logger) ensuring multiple import paths
resolve to the same instance, and for the formatting of the logger.

These are lightweight runtime identity tests (no numerical work) so
they should be fast and safe for CI.
"""

import io
import logging

from importlib import reload

from TBS.common.flog import Logger


def test_logger_singleton_identity():
    ''' Test that get_logger() returns the same instance across multiple calls. '''
    from TBS.tbs_globals import get_logger
    log1    = get_logger()
    log2    = get_logger()
    assert log1 is log2, "get_logger() returned different instances (expected singleton)."

def test_logger_reexported_from_package():
    ''' TBS.get_logger and TBS.tbs_globals.get_logger hand out the same logger. '''
    import TBS
    from TBS.tbs_globals import get_logger
    assert TBS.get_logger() is get_logger()

def test_default_logger_is_shared_by_components():
    ''' Components without an explicit logger fall back to the global one. '''
    from TBS.tbs_globals import get_logger
    from TBS.Algebra.model import Model
    from TBS.Solver.diagonalizer import Diagonalizer
    assert Model()._logger is get_logger()
    assert Diagonalizer()._logger is get_logger()

def test_reload_keeps_stdlib_logger():
    ''' Reloading tbs_globals creates a new wrapper around the same logging.Logger. '''
    import TBS.tbs_globals as tg
    before  = tg.get_logger().logger
    reload(tg)
    after   = tg.get_logger().logger
    assert before is after

def test_say_indents_and_filters():
    stream  = io.StringIO()
    log     = Logger(name="tbs_test_globals_say", level="info", use_color=False, stream=stream)
    log.say("shown", lvl=2)
    log.say("hidden", log='debug')
    text    = stream.getvalue()
    assert "    shown" in text
    assert "hidden" not in text
    assert log.level == logging.INFO

def test_colorize():
    plain   = Logger(name="tbs_test_globals_plain", use_color=False, stream=io.StringIO())
    colored = Logger(name="tbs_test_globals_color", use_color=True, stream=io.StringIO())
    assert plain.colorize("x", "red") == "x"
    assert colored.colorize("x", "red") == "\033[91mx\033[0m"
    assert colored.colorize("x", "purple") == "x"

# ----------------------------------------------------------------------------------------------------
#! End of test_globals_singleton.py
# ----------------------------------------------------------------------------------------------------
