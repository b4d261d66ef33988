from typing import Mapping, Optional

import logging
import os

from . import ktest_errors

FORK_ENV = "KTEST_FORK"
EXIT_ENV = "KTEST_EXIT"
LOG_ENV = "KTEST_LOG"


def _flag(env: Mapping[str, str], key: str) -> bool:
    # Only "1" enables a flag
    return env.get(key) == "1"


class KTestConfig:
    """Settings for a test run"""

    def __init__(
        self,
        isolate: bool = False,
        exit_on_failure: bool = False,
        log_level: int = logging.WARNING,
    ):
        """
        :param isolate: Run every test in its own forked process
        :param exit_on_failure: Exit the process with a failure status if any test
                                failed
        :param log_level: The level harness logging is configured with
        """
        self.isolate: bool = isolate
        self.exit_on_failure: bool = exit_on_failure
        self.log_level: int = log_level

    def __repr__(self) -> str:
        return (
            f"KTestConfig(isolate={self.isolate}, "
            f"exit_on_failure={self.exit_on_failure}, "
            f"log_level={logging.getLevelName(self.log_level)})"
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "KTestConfig":
        """
        Read the configuration from environment variables:
        KTEST_FORK=1 enables isolation, KTEST_EXIT=1 enables exit on failure, and
        KTEST_LOG sets the log level by name (ex: 'DEBUG').

        :param env: The environment to read (defaults to os.environ)
        :return: The configuration
        """
        env = os.environ if env is None else env

        log_level = logging.WARNING
        level_name = env.get(LOG_ENV)
        if level_name:
            level = logging.getLevelName(level_name.strip().upper())
            if not isinstance(level, int):
                error_msg = f"Unknown log level in {LOG_ENV}: '{level_name}'"
                raise ktest_errors.ConfigurationError(error_msg)
            log_level = level

        return cls(
            isolate=_flag(env, FORK_ENV),
            exit_on_failure=_flag(env, EXIT_ENV),
            log_level=log_level,
        )

    def apply_logging(self) -> None:
        """
        Configure the root logger with this configuration's level.
        """
        logging.basicConfig(level=self.log_level)
