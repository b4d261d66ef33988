from typing import Optional, Union

import signal


# Union type representing all possible test outcomes ----------------------------------#
OutcomeType = Union[
    "Passed",
    "Failed",
    "Crashed",
]


# Passed ------------------------------------------------------------------------------#
class Passed:
    """The test body finished without failing an assertion"""

    def __init__(self):
        pass

    def __eq__(self, other):
        return isinstance(other, Passed)

    def __repr__(self) -> str:
        return "Passed()"


# Failed ------------------------------------------------------------------------------#
class Failed:
    """An assertion failed, or the test body raised an unexpected error"""

    def __init__(self):
        pass

    def __eq__(self, other):
        return isinstance(other, Failed)

    def __repr__(self) -> str:
        return "Failed()"


# Crashed -----------------------------------------------------------------------------#
class Crashed:
    """The isolated test process was terminated by a signal"""

    __match_args__ = ("signal",)

    def __init__(self, signal: int):
        """
        :param signal: The number of the signal that terminated the test process
        """
        self.signal: int = signal

    def __eq__(self, other):
        return isinstance(other, Crashed) and self.signal == other.signal

    def __repr__(self) -> str:
        return f"Crashed({self.signal})"

    def signal_name(self) -> str:
        """
        Get a human readable name for the signal (ex: 'Segmentation fault (SIGSEGV)').

        :return: The signal's description, with its symbolic name when known
        """
        description: Optional[str]
        try:
            description = signal.strsignal(self.signal)
        except ValueError:
            # Out of range for this platform
            description = None

        symbol: Optional[str]
        try:
            symbol = signal.Signals(self.signal).name
        except ValueError:
            symbol = None

        match (description, symbol):
            case (None, None):
                return f"Unknown signal {self.signal}"
            case (None, symbol):
                return symbol
            case (description, None):
                return description
            case _:
                return f"{description} ({symbol})"


def is_failure(outcome: OutcomeType) -> bool:
    """
    :return: Whether the outcome counts as a failed test
    """
    match outcome:
        case Passed():
            return False
        case Failed() | Crashed(_):
            return True
        case _:
            raise TypeError(f"Not a test outcome: {outcome!r}")
