from typing import NoReturn, Optional

import logging
import os
import sys
import traceback

from . import config as ktest_config
from . import ktest_errors
from . import outcome
from . import print_helper
from . import registry as ktest_registry

# Exit status of an isolated test process whose assertion failed
CHILD_FAILURE_STATUS = 1
# Exit status of an isolated test process whose body raised an unexpected error
CHILD_ERROR_STATUS = 2
# Exit status of the harness when exit on failure is enabled and a test failed
EXIT_FAILURE_STATUS = 255


# Summary -----------------------------------------------------------------------------#
class RunSummary:
    """Counts and outcomes of a test run, in run order."""

    def __init__(self):
        self.passed: int = 0
        self.failed: int = 0
        # Tests that could not be started (isolated mode only)
        self.errored: int = 0
        self.outcomes: list[
            tuple[ktest_registry.KTest, Optional[outcome.OutcomeType]]
        ] = []

    def __repr__(self) -> str:
        return (
            f"RunSummary(passed={self.passed}, failed={self.failed}, "
            f"errored={self.errored})"
        )

    @property
    def total(self) -> int:
        return self.passed + self.failed

    @property
    def success(self) -> bool:
        return self.failed == 0

    def record(
        self, test: ktest_registry.KTest, result: Optional[outcome.OutcomeType]
    ) -> None:
        """
        Record the outcome of one test.

        :param test: The test that was run
        :param result: Its outcome, or None if it could not be started
        """
        self.outcomes.append((test, result))
        if result is None:
            self.errored += 1
        elif outcome.is_failure(result):
            self.failed += 1
        else:
            self.passed += 1


# Execution ---------------------------------------------------------------------------#
def _report_unexpected(test: ktest_registry.KTest, e: BaseException) -> None:
    logging.critical(f"Test '{test.name}' raised an exception: {e!r}")
    traceback.print_exception(e)


def _run_in_process(test: ktest_registry.KTest) -> outcome.OutcomeType:
    """
    Run a test in the harness process.

    :param test: The test to run
    :return: Passed, or Failed if an assertion failed or the body raised
    """
    logging.debug(f"Running test in process: {test.name}")
    try:
        test.run()
    except ktest_errors.KAssertionError:
        return outcome.Failed()
    except (KeyboardInterrupt, SystemExit):
        raise
    except BaseException as e:
        _report_unexpected(test, e)
        return outcome.Failed()
    return outcome.Passed()


def _run_child(test: ktest_registry.KTest) -> NoReturn:
    """
    Run a test inside a forked process and exit with a status describing the result.
    Never returns into the caller's code.
    """
    status = 0
    try:
        test.run()
    except ktest_errors.KAssertionError:
        status = CHILD_FAILURE_STATUS
    except SystemExit as e:
        # The body exited on its own
        match e.code:
            case None:
                status = 0
            case int(code):
                status = code
            case _:
                status = CHILD_ERROR_STATUS
    except BaseException as e:
        _report_unexpected(test, e)
        status = CHILD_ERROR_STATUS
    finally:
        try:
            sys.stdout.flush()
            sys.stderr.flush()
        finally:
            os._exit(status)


def classify_status(status: int) -> outcome.OutcomeType:
    """
    Classify the wait status of an isolated test process.

    :param status: The status returned by os.waitpid
    :return: Passed on exit status 0, Failed on any other exit status, Crashed when
             the process was terminated by a signal
    """
    if os.WIFSIGNALED(status):
        return outcome.Crashed(os.WTERMSIG(status))
    if os.WIFEXITED(status):
        exit_status = os.WEXITSTATUS(status)
        if exit_status == 0:
            return outcome.Passed()
        logging.debug(f"Test process exited with status {exit_status}")
        return outcome.Failed()

    logging.error(f"Unexpected wait status for test process: {status}")
    return outcome.Failed()


def _run_isolated(test: ktest_registry.KTest) -> Optional[outcome.OutcomeType]:
    """
    Run a test in a forked process and wait for it to finish.

    :param test: The test to run
    :return: The classified outcome, or None if the process could not be started
    """
    # Pending output would otherwise be written by both processes
    sys.stdout.flush()
    sys.stderr.flush()

    try:
        pid = os.fork()
    except OSError as e:
        logging.error(f"Failed to fork for test '{test.name}': {e}")
        print_helper.print_spawn_error(test.name, e.strerror or str(e))
        return None

    if pid == 0:
        _run_child(test)

    logging.debug(f"Waiting for test process {pid}: {test.name}")
    _, status = os.waitpid(pid, 0)
    return classify_status(status)


def _print_outcome(
    test: ktest_registry.KTest, result: Optional[outcome.OutcomeType]
) -> None:
    match result:
        case None:
            # Already reported when the process failed to start
            pass
        case outcome.Passed():
            print_helper.print_test_passed(test.name)
        case outcome.Crashed(_):
            print_helper.print_test_failed(test.name, result.signal_name())
        case outcome.Failed():
            print_helper.print_test_failed(test.name)


# Run ---------------------------------------------------------------------------------#
def run_all_tests(
    test_registry: Optional[ktest_registry.KTestRegistry] = None,
    *,
    isolate: Optional[bool] = None,
    exit_on_failure: Optional[bool] = None,
    config: Optional[ktest_config.KTestConfig] = None,
) -> RunSummary:
    """
    Run every registered test in registration order and print a summary.

    Settings not passed explicitly come from `config`, or from the environment when no
    config is given (see KTestConfig.from_env).

    :param test_registry: The tests to run (defaults to the default registry)
    :param isolate: Run every test in its own forked process
    :param exit_on_failure: Exit the process with EXIT_FAILURE_STATUS if a test failed
    :param config: The run configuration
    :return: The run summary
    """
    if test_registry is None:
        test_registry = ktest_registry.default_registry()
    if config is None and (isolate is None or exit_on_failure is None):
        config = ktest_config.KTestConfig.from_env()
        config.apply_logging()
    if isolate is None:
        isolate = config.isolate
    if exit_on_failure is None:
        exit_on_failure = config.exit_on_failure

    if isolate and not hasattr(os, "fork"):
        raise ktest_errors.ConfigurationError(
            "Test isolation requires os.fork, which this platform does not provide"
        )

    logging.debug(f"Running {len(test_registry)} tests (isolate={isolate})...")
    summary = RunSummary()
    with test_registry:
        for test in test_registry:
            print_helper.print_test_start(test.name)
            result = _run_isolated(test) if isolate else _run_in_process(test)
            summary.record(test, result)
            _print_outcome(test, result)

    print_helper.print_results(summary.passed, summary.failed, summary.errored)
    logging.debug(f"Finished test run: {summary}")

    if exit_on_failure and summary.failed:
        print_helper.print_exiting()
        sys.exit(EXIT_FAILURE_STATUS)

    print()
    return summary
