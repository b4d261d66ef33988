import ctypes
import logging

import ktest.ktest as kt


@kt.test
def hello_test():
    vec: list[str] = []
    kt.assert_true(len(vec) == 0)


@kt.test
def hello_other_test():
    kt.assert_eq(5, 2 + 3)


@kt.test("wrong_sum")
def wrong_sum_test():
    kt.assert_eq(2 + 2, 5, "arithmetic still works")


@kt.test
def raises_test():
    with kt.assert_raises(ValueError):
        int("not a number")


def crash_test():
    # Reads address 0; only contained when run with KTEST_FORK=1
    ctypes.string_at(0)


def main():
    config = kt.KTestConfig.from_env()
    config.apply_logging()

    if config.isolate:
        kt.add_test(crash_test)
    else:
        logging.info("Skipping crash_test, run with KTEST_FORK=1 to include it")

    kt.run_all_tests(config=config)
    print("Hello, World!")


if __name__ == "__main__":
    main()
