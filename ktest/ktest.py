"""
Everything a test file needs, in one place:

    import ktest.ktest as kt

    @kt.test
    def hello_test():
        kt.assert_true(len([]) == 0)

    kt.run_all_tests()

Isolation and exit on failure are read from KTEST_FORK / KTEST_EXIT unless passed to
run_all_tests.
"""

from .assertions import (
    assert_base,
    assert_eq,
    assert_false,
    assert_ne,
    assert_raises,
    assert_true,
    report_failure,
)
from .config import KTestConfig
from .ktest_errors import ConfigurationError, KAssertionError, RegistrationError
from .outcome import Crashed, Failed, Passed
from .registry import KTest, KTestRegistry, add_test, default_registry, test
from .result import AssertionResult
from .runner import EXIT_FAILURE_STATUS, RunSummary, run_all_tests

__all__ = [
    "AssertionResult",
    "ConfigurationError",
    "Crashed",
    "EXIT_FAILURE_STATUS",
    "Failed",
    "KAssertionError",
    "KTest",
    "KTestConfig",
    "KTestRegistry",
    "Passed",
    "RegistrationError",
    "RunSummary",
    "add_test",
    "assert_base",
    "assert_eq",
    "assert_false",
    "assert_ne",
    "assert_raises",
    "assert_true",
    "default_registry",
    "report_failure",
    "run_all_tests",
    "test",
]
