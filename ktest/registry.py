from typing import Any, Callable, Iterator, Optional

import logging

from . import ktest_errors


# Test case ---------------------------------------------------------------------------#
class KTest:
    """A named test: a body that is run with no arguments."""

    def __init__(
        self,
        name: str,
        func: Callable[..., None],
        args: tuple[Any, ...] = (),
        kwargs: Optional[dict[str, Any]] = None,
    ):
        """
        :param name: The name of the test
        :param func: The test function to be called
        :param args: Positional arguments to pass to the test function
        :param kwargs: Keyword arguments to pass to the test function
        """
        self._name: str = name
        self._func: Callable[..., None] = func
        self._args: tuple[Any, ...] = tuple(args)
        self._kwargs: dict[str, Any] = dict(kwargs or {})

    def __repr__(self) -> str:
        return f"KTest({self._name!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def func(self) -> Callable[..., None]:
        return self._func

    def run(self) -> None:
        """
        Run the test function with the stored arguments.
        """
        self._func(*self._args, **self._kwargs)


# Registry ----------------------------------------------------------------------------#
class KTestRegistry:
    """
    An ordered collection of tests. Tests run in the order they were added. Adding is
    only allowed while the registry is not being run.
    """

    def __init__(self):
        self._tests: list[KTest] = []
        self._running: bool = False

    def __len__(self) -> int:
        return len(self._tests)

    def __iter__(self) -> Iterator[KTest]:
        return iter(tuple(self._tests))

    @property
    def running(self) -> bool:
        return self._running

    def add_test(
        self, func: Callable[..., None], *args, name: Optional[str] = None, **kwargs
    ) -> KTest:
        """
        Register a test function to be run later.

        :param func: The test function to register.
        :param args: Positional arguments to pass to the test function.
        :param name: The test's name. Defaults to the function's name.
        :param kwargs: Keyword arguments to pass to the test function.
        :return: The registered test.
        """
        if not callable(func):
            raise ktest_errors.RegistrationError(f"Test body is not callable: {func!r}")
        test_name = func.__name__ if name is None else name
        if self._running:
            raise ktest_errors.RegistrationError(
                f"Can not add test '{test_name}' while tests are running"
            )

        logging.debug(f"Adding test: {test_name}")
        test = KTest(test_name, func, args, kwargs)
        self._tests.append(test)
        return test

    def test(self, name: Optional[str | Callable[..., None]] = None):
        """
        Decorator registering a function as a test when it is defined.
        Works bare (`@registry.test`) or with a name (`@registry.test("name")`).

        :param name: The test's name. Defaults to the function's name.
        :return: The decorator, or the function itself when used bare.
        """
        if callable(name):
            func = name
            self.add_test(func)
            return func

        def decorator(func: Callable[..., None]) -> Callable[..., None]:
            self.add_test(func, name=name)
            return func

        return decorator

    # Run phase -----------------------------------------------------------------------#
    def __enter__(self):
        self._running = True
        return self

    def __exit__(self, exc_type, exc_value, _traceback):
        self._running = False
        return False


# Default registry --------------------------------------------------------------------#
g_registry: KTestRegistry = KTestRegistry()


def default_registry() -> KTestRegistry:
    """
    Get the process-wide registry used by `add_test`, `test` and `run_all_tests`.
    """
    return g_registry


def add_test(func: Callable[..., None], *args, name: Optional[str] = None, **kwargs):
    """
    Register a test function in the default registry.

    :param func: The test function to register.
    :param args: Positional arguments to pass to the test function.
    :param name: The test's name. Defaults to the function's name.
    :param kwargs: Keyword arguments to pass to the test function.
    :return: The registered test.
    """
    return g_registry.add_test(func, *args, name=name, **kwargs)


def test(name: Optional[str | Callable[..., None]] = None):
    """
    Decorator registering a function in the default registry.
    """
    return g_registry.test(name)
