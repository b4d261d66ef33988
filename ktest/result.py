from typing import Callable, Union

# A message is either already built or built on demand
MessageSource = Union[str, Callable[[], str]]


class AssertionResult:
    """
    The result of evaluating one assertion: a success flag and a diagnostic message.
    The message may be given as a zero-argument producer, which is only called the
    first time the message is asked for.
    """

    def __init__(self, success: bool, msg: MessageSource = ""):
        """
        :param success: Whether the checked condition held
        :param msg: The diagnostic message, or a function producing it
        """
        self._success: bool = bool(success)
        self._msg_source: MessageSource = msg
        self._msg: str | None = msg if isinstance(msg, str) else None

    def __bool__(self) -> bool:
        return self._success

    def __repr__(self) -> str:
        return f"AssertionResult(success={self._success})"

    @property
    def success(self) -> bool:
        return self._success

    def msg(self) -> str:
        """
        Get the diagnostic message, building it on first use.

        :return: The formatted message
        """
        if self._msg is None:
            self._msg = self._msg_source()
        return self._msg
