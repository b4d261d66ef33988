import inspect
import re

import pytest

from ktest import assertions
from ktest import source
from ktest.ktest_errors import KAssertionError


def _lines(capsys, plain) -> list[str]:
    return plain(capsys.readouterr().out).splitlines()


def test_passing_assertions_print_nothing(capsys):
    assertions.assert_true(len([]) == 0)
    assertions.assert_false(3 > 4)
    assertions.assert_eq(5, 2 + 3)
    assertions.assert_ne(1, 2)
    assertions.assert_base(True, "never shown")

    assert capsys.readouterr().out == ""


def test_assert_true_failure_output(capsys, plain):
    items = [1]
    with pytest.raises(KAssertionError):
        assertions.assert_true(len(items) == 0)

    lines = _lines(capsys, plain)
    assert re.fullmatch(r".*test_assertions\.py:\d+: Assertion Failure", lines[0])
    assert lines[1:] == [
        "ASSERT_TRUE - Expected the following to be true:",
        "  'len(items) == 0': False",
    ]


def test_failure_location_is_the_assertion_line(capsys, plain):
    frame = inspect.currentframe()
    with pytest.raises(KAssertionError):
        line = frame.f_lineno + 1
        assertions.assert_true(False)

    assert _lines(capsys, plain)[0] == f"{__file__}:{line}: Assertion Failure"


def test_assert_false_failure_output(capsys, plain):
    flag = True
    with pytest.raises(KAssertionError):
        assertions.assert_false(flag)

    assert _lines(capsys, plain)[1:] == [
        "ASSERT_FALSE - Expected the following to be false:",
        "  'flag': True",
    ]


def test_assert_eq_failure_quotes_both_operands(capsys, plain):
    with pytest.raises(KAssertionError):
        assertions.assert_eq(1, 2)

    assert _lines(capsys, plain)[1:] == [
        "ASSERT_EQ - Expected the following to be equal:",
        "  '1': 1",
        "  '2': 2",
    ]


def test_assert_ne_failure_quotes_both_operands(capsys, plain):
    expected = "abc"
    with pytest.raises(KAssertionError):
        assertions.assert_ne(expected, "ab" + "c")

    assert _lines(capsys, plain)[1:] == [
        "ASSERT_NE - Expected the following to be not equal:",
        "  'expected': abc",
        "  '\"ab\" + \"c\"': abc",
    ]


def test_detail_line_is_indented(capsys, plain):
    with pytest.raises(KAssertionError):
        assertions.assert_eq(4, 2 + 3, "math is broken")

    lines = _lines(capsys, plain)
    assert lines[-1] == "    math is broken"


def test_detail_line_omitted_when_empty(capsys, plain):
    with pytest.raises(KAssertionError):
        assertions.assert_true(0)

    lines = _lines(capsys, plain)
    assert len(lines) == 3
    assert not lines[-1].startswith("    ")


def test_lazy_detail_only_called_on_failure(capsys):
    calls = []

    def detail():
        calls.append(1)
        return "lazy detail"

    assertions.assert_true(True, detail)
    assert calls == []

    with pytest.raises(KAssertionError):
        assertions.assert_true(False, detail)
    assert calls == [1]
    assert "    lazy detail" in capsys.readouterr().out


def test_description_not_built_on_success(monkeypatch):
    def fail(*_args, **_kwargs):
        raise AssertionError("description was built for a passing assertion")

    monkeypatch.setattr(source, "call_args", fail)

    assertions.assert_true(1 == 1)
    assertions.assert_eq([1], [1])
    assertions.assert_ne(1, 0)


def test_falls_back_to_repr_without_source(monkeypatch, capsys, plain):
    monkeypatch.setattr(source, "call_args", lambda *_args, **_kwargs: None)

    with pytest.raises(KAssertionError):
        assertions.assert_eq("x", "y")

    assert _lines(capsys, plain)[1:] == [
        "ASSERT_EQ - Expected the following to be equal:",
        "  ''x'': x",
        "  ''y'': y",
    ]


def test_assert_base_uses_custom_description(capsys, plain):
    with pytest.raises(KAssertionError):
        assertions.assert_base(False, lambda: "custom description", "more")

    assert _lines(capsys, plain)[1:] == ["custom description", "    more"]


def test_failure_signal_is_not_an_exception():
    # Code under test catching Exception must not swallow a failed assertion
    with pytest.raises(KAssertionError):
        try:
            assertions.assert_true(False)
        except Exception:
            pytest.fail("assertion failure was caught as an Exception")


# assert_raises -----------------------------------------------------------------------#
def test_assert_raises_passes_and_keeps_exception(capsys):
    with assertions.assert_raises(ValueError) as ctx:
        int("not a number")

    assert isinstance(ctx.exception, ValueError)
    assert capsys.readouterr().out == ""


def test_assert_raises_accepts_subclasses():
    with assertions.assert_raises(LookupError) as ctx:
        {}["missing"]

    assert isinstance(ctx.exception, KeyError)


def test_assert_raises_different_exception(capsys, plain):
    with pytest.raises(KAssertionError):
        with assertions.assert_raises(TypeError):
            raise ValueError("boom")

    assert _lines(capsys, plain)[1:] == [
        "ASSERT_RAISES - Expected the exception 'TypeError' to be raised by the "
        "following code:",
        '  raise ValueError("boom")',
        'but a different exception was raised: ValueError("boom")',
    ]


def test_assert_raises_nothing_raised(capsys, plain):
    with pytest.raises(KAssertionError):
        with assertions.assert_raises(ValueError):
            value = int("5")

    assert value == 5
    assert _lines(capsys, plain)[1:] == [
        "ASSERT_RAISES - Expected the exception 'ValueError' to be raised by the "
        "following code:",
        '  value = int("5")',
        "but no exception was raised.",
    ]


def test_assert_raises_callable_form():
    exc = assertions.assert_raises(ValueError, int, "x")
    assert isinstance(exc, ValueError)


def test_assert_raises_callable_form_failure(capsys, plain):
    with pytest.raises(KAssertionError):
        assertions.assert_raises(ValueError, int, "5")

    lines = _lines(capsys, plain)
    assert lines[2] == '  int("5")'
    assert lines[3] == "but no exception was raised."


def test_assert_raises_lets_failed_assertions_through():
    with pytest.raises(KAssertionError):
        with assertions.assert_raises(Exception):
            assertions.assert_true(False)


def test_assert_raises_base_exception_lets_failed_assertions_through():
    with pytest.raises(KAssertionError):
        with assertions.assert_raises(BaseException):
            assertions.assert_true(False)


def test_assert_raises_accepts_tuple_of_types():
    with assertions.assert_raises((KeyError, IndexError)) as ctx:
        [][0]

    assert isinstance(ctx.exception, IndexError)


def test_assert_raises_tuple_of_types_nothing_raised(capsys, plain):
    with pytest.raises(KAssertionError):
        with assertions.assert_raises((KeyError, IndexError)):
            pass

    lines = _lines(capsys, plain)
    assert lines[1] == (
        "ASSERT_RAISES - Expected the exception 'KeyError or IndexError' to be raised "
        "by the following code:"
    )
    assert lines[-1] == "but no exception was raised."



def test_assert_raises_lets_keyboard_interrupt_through():
    with pytest.raises(KeyboardInterrupt):
        with assertions.assert_raises(ValueError):
            raise KeyboardInterrupt()
