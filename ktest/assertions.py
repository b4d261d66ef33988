from types import CodeType, FrameType
from typing import Any, Callable, NoReturn, Optional, Type, Union

import logging
import sys

from . import ktest_errors
from . import print_helper
from . import result
from . import source

# An exception type, or a tuple of them (as accepted by isinstance)
ExpectedType = Union[Type[BaseException], tuple[Type[BaseException], ...]]


# Failure reporting -------------------------------------------------------------------#
def report_failure(
    res: result.AssertionResult,
    filepath: str,
    line: int,
    msg: result.MessageSource = "",
) -> NoReturn:
    """
    Print a failed assertion and unwind out of the current test.

    :param res: The failed assertion result
    :param filepath: The file the assertion is in
    :param line: The line the assertion is on
    :param msg: An optional detail message (or function producing it) printed below
                the description
    :raises KAssertionError: Always
    """
    detail = msg() if callable(msg) else msg
    logging.debug(f"Assertion failed at {filepath}:{line}")
    print_helper.print_assertion_failure(filepath, line, res.msg(), detail)
    raise ktest_errors.KAssertionError()


def _evaluate(
    check: bool,
    describe: Callable[[source.CallSite], str],
    msg: result.MessageSource,
    frame: FrameType,
) -> None:
    # The description is only built if the check failed
    res = result.AssertionResult(
        check, lambda: describe(source.CallSite.from_frame(frame))
    )
    if not res:
        report_failure(res, frame.f_code.co_filename, frame.f_lineno, msg)


def _exprs(site: source.CallSite, func_name: str, values: tuple[Any, ...]) -> list[str]:
    """
    Source text for each checked value, or its repr when the source is unavailable.
    """
    args = source.call_args(site, func_name) or []
    return [
        args[i] if i < len(args) else repr(value) for i, value in enumerate(values)
    ]


# Base --------------------------------------------------------------------------------#
def assert_base(
    check: bool, desc: result.MessageSource, msg: result.MessageSource = ""
) -> None:
    """
    Assert that a check holds, with a custom description.

    :param check: The checked condition
    :param desc: The description printed on failure, or a function producing it
    :param msg: An optional detail message, or a function producing it
    """
    _evaluate(
        check,
        lambda _site: desc() if callable(desc) else desc,
        msg,
        sys._getframe(1),
    )


# Boolean -----------------------------------------------------------------------------#
def _describe_bool(
    kind: str, wanted: str, func_name: str, value: Any
) -> Callable[[source.CallSite], str]:
    def describe(site: source.CallSite) -> str:
        (expr,) = _exprs(site, func_name, (value,))
        return (
            f"{kind} - Expected the following to be {wanted}:\n"
            f"  '{expr}': {value}"
        )

    return describe


def assert_true(check: Any, msg: result.MessageSource = "") -> None:
    """
    Assert that a value is truthy.

    :param check: The checked value
    :param msg: An optional detail message, or a function producing it
    """
    _evaluate(
        bool(check),
        _describe_bool("ASSERT_TRUE", "true", "assert_true", check),
        msg,
        sys._getframe(1),
    )


def assert_false(check: Any, msg: result.MessageSource = "") -> None:
    """
    Assert that a value is falsy.

    :param check: The checked value
    :param msg: An optional detail message, or a function producing it
    """
    _evaluate(
        not check,
        _describe_bool("ASSERT_FALSE", "false", "assert_false", check),
        msg,
        sys._getframe(1),
    )


# Equality ----------------------------------------------------------------------------#
def _describe_pair(
    kind: str, wanted: str, func_name: str, expected: Any, actual: Any
) -> Callable[[source.CallSite], str]:
    def describe(site: source.CallSite) -> str:
        expected_expr, actual_expr = _exprs(site, func_name, (expected, actual))
        return (
            f"{kind} - Expected the following to be {wanted}:\n"
            f"  '{expected_expr}': {expected}\n"
            f"  '{actual_expr}': {actual}"
        )

    return describe


def assert_eq(expected: Any, actual: Any, msg: result.MessageSource = "") -> None:
    """
    Assert that two values are equal.

    :param expected: The expected value
    :param actual: The actual value
    :param msg: An optional detail message, or a function producing it
    """
    _evaluate(
        expected == actual,
        _describe_pair("ASSERT_EQ", "equal", "assert_eq", expected, actual),
        msg,
        sys._getframe(1),
    )


def assert_ne(expected: Any, actual: Any, msg: result.MessageSource = "") -> None:
    """
    Assert that two values are not equal.

    :param expected: The value `actual` must differ from
    :param actual: The actual value
    :param msg: An optional detail message, or a function producing it
    """
    _evaluate(
        expected != actual,
        _describe_pair("ASSERT_NE", "not equal", "assert_ne", expected, actual),
        msg,
        sys._getframe(1),
    )


# Exceptions --------------------------------------------------------------------------#
class RaisesContext:
    """
    Context manager checking that its block raises an expected exception. The expected
    exception is suppressed and kept in `exception`.
    """

    def __init__(
        self,
        expected: ExpectedType,
        frame: FrameType,
        msg: result.MessageSource = "",
        code: Optional[Callable[[], Optional[str]]] = None,
    ):
        """
        :param expected: The exception type (or tuple of types) the block should raise
        :param frame: The frame that created the context (the test body)
        :param msg: An optional detail message, or a function producing it
        :param code: Function producing the source text of the checked code, if it is
                     not the body of the `with` statement
        """
        self._expected: ExpectedType = expected
        self._msg: result.MessageSource = msg
        self._filepath: str = frame.f_code.co_filename
        self._line: int = frame.f_lineno
        # Position of the call that created this context, resolved on failure only
        self._code_obj: CodeType = frame.f_code
        self._lasti: int = frame.f_lasti
        self._code: Optional[Callable[[], Optional[str]]] = code
        self.exception: Optional[BaseException] = None

    def __enter__(self) -> "RaisesContext":
        return self

    def __exit__(self, exc_type, exc_value, _traceback):
        if exc_type is not None and issubclass(exc_type, ktest_errors.KAssertionError):
            # An assertion inside the block failed
            return False

        if exc_type is not None and issubclass(exc_type, self._expected):
            self.exception = exc_value
            return True

        if exc_type is not None and not issubclass(exc_type, Exception):
            # Not an error raised by the checked code (ex: KeyboardInterrupt)
            return False

        res = result.AssertionResult(False, lambda: self._describe(exc_value))
        report_failure(res, self._filepath, self._line, self._msg)

    def _code_text(self) -> str:
        if self._code is not None:
            text = self._code()
        else:
            site = source.CallSite.from_instruction(
                self._code_obj, self._lasti, self._line
            )
            text = source.with_body(site, "assert_raises")
        return "<unknown>" if text is None else text

    def _expected_name(self) -> str:
        if isinstance(self._expected, tuple):
            return " or ".join(kind.__name__ for kind in self._expected)
        return self._expected.__name__

    def _describe(self, exc_value: Optional[BaseException]) -> str:
        head = (
            f"ASSERT_RAISES - Expected the exception '{self._expected_name()}' to be "
            f"raised by the following code:\n  {self._code_text()}\n"
        )
        if exc_value is None:
            return head + "but no exception was raised."
        return (
            head + "but a different exception was raised: "
            f'{type(exc_value).__name__}("{exc_value}")'
        )


def assert_raises(
    expected: ExpectedType,
    func: Optional[Callable[..., Any]] = None,
    *args: Any,
    msg: result.MessageSource = "",
    **kwargs: Any,
):
    """
    Assert that code raises an exception of the expected type (or a subclass).

    Use as a context manager around the checked block:

        with assert_raises(ValueError):
            int("nope")

    or pass a function and its arguments to call it directly.

    :param expected: The exception type (or tuple of types) that should be raised
    :param func: A function to call (optional; omit to use as a context manager)
    :param args: Positional arguments for `func`
    :param msg: An optional detail message, or a function producing it
    :param kwargs: Keyword arguments for `func`
    :return: The context manager, or the raised exception when `func` is given
    """
    frame = sys._getframe(1)
    if func is None:
        return RaisesContext(expected, frame, msg)

    def code() -> str:
        site = source.CallSite.from_frame(frame)
        exprs = source.call_args(site, "assert_raises")
        if exprs is None or len(exprs) < 2:
            return f"{getattr(func, '__qualname__', repr(func))}()"
        return f"{exprs[1]}({', '.join(exprs[2:])})"

    with RaisesContext(expected, frame, msg, code) as ctx:
        func(*args, **kwargs)
    return ctx.exception
