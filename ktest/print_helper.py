from typing import Optional

import sys

import colorama

colorama.just_fix_windows_console()

RESET = colorama.Style.RESET_ALL
NAME = colorama.Style.BRIGHT + colorama.Fore.CYAN
GOOD = colorama.Style.BRIGHT + colorama.Fore.GREEN
BAD = colorama.Style.BRIGHT + colorama.Fore.RED
BOLD = colorama.Style.BRIGHT


def print_test_start(test_name: str) -> None:
    print(f"Running test: {NAME}{test_name}{RESET}", flush=True)


def print_test_passed(test_name: str) -> None:
    print(f"Test {NAME}{test_name}{RESET} {GOOD}passed{RESET}.")


def print_test_failed(test_name: str, signal_name: Optional[str] = None) -> None:
    suffix = "" if signal_name is None else f" Signal: {signal_name}"
    print(f"Test {NAME}{test_name}{RESET} {BAD}failed{RESET}.{suffix}")


def print_spawn_error(test_name: str, reason: str) -> None:
    print(f"Error starting test {test_name}: {reason}", file=sys.stderr)


def print_assertion_failure(filepath: str, line: int, msg: str, detail: str) -> None:
    print(f"{filepath}:{line}: {BAD}Assertion Failure{RESET}")
    print(msg)
    if detail:
        print(f"    {detail}")


def print_results(passed: int, failed: int, not_run: int) -> None:
    print(f"{BOLD}## TEST RESULTS ##{RESET}")
    print(f"  Tests passed: {passed}")
    print(f"  Tests failed: {failed}")
    if not_run:
        print(f"  Tests not run: {not_run}")

    if failed:
        print(f"{BAD}## TESTS FAILED ##{RESET}")


def print_exiting() -> None:
    print("Exiting...", flush=True)
