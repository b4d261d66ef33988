"""
Recovers the source text of an assertion's arguments from the calling frame, so a
failure can quote the checked expression (ex: 'vec.empty()') next to its value.
Only used when an assertion fails.
"""

from types import CodeType, FrameType
from typing import Optional

import ast
import functools
import itertools
import linecache
import logging


# Call site ---------------------------------------------------------------------------#
class CallSite:
    """The location of an assertion call inside a test body."""

    def __init__(
        self,
        filename: str,
        line: int,
        col: Optional[int] = None,
        end_line: Optional[int] = None,
        end_col: Optional[int] = None,
    ):
        """
        :param filename: The file the call is in
        :param line: The line the call starts on
        :param col: The column the call starts at (utf-8 byte offset, if known)
        :param end_line: The line the call ends on (if known)
        :param end_col: The column the call ends at (utf-8 byte offset, if known)
        """
        self.filename: str = filename
        self.line: int = line
        self.col: Optional[int] = col
        self.end_line: Optional[int] = end_line
        self.end_col: Optional[int] = end_col

    @classmethod
    def from_instruction(cls, code: CodeType, lasti: int, lineno: int) -> "CallSite":
        """
        Build a call site from the instruction a frame is executing.

        :param code: The code object of the frame
        :param lasti: The frame's current instruction offset (f_lasti)
        :param lineno: The frame's current line, used when positions are missing
        :return: The call site of that instruction
        """
        positions = None
        if lasti >= 0:
            # One position entry per 2-byte code unit
            units = itertools.islice(code.co_positions(), lasti // 2, None)
            positions = next(units, None)
        if positions is None or positions[0] is None:
            return cls(code.co_filename, lineno)
        line, end_line, col, end_col = positions
        return cls(code.co_filename, line, col, end_line, end_col)

    @classmethod
    def from_frame(cls, frame: FrameType) -> "CallSite":
        """
        Build a call site from a frame that is currently executing a call.

        :param frame: The frame of the test body
        :return: The call site of the instruction the frame is executing
        """
        return cls.from_instruction(frame.f_code, frame.f_lasti, frame.f_lineno)

    def __repr__(self) -> str:
        return f"CallSite({self.filename}:{self.line})"


# Parsing -----------------------------------------------------------------------------#
@functools.lru_cache(maxsize=32)
def _parse(filename: str, text: str) -> Optional[ast.Module]:
    try:
        return ast.parse(text, filename=filename)
    except SyntaxError as e:
        # File changed on disk since it was imported
        logging.debug(f"Could not parse {filename} for assertion source: {e}")
        return None


def _load(filename: str) -> Optional[tuple[str, ast.Module]]:
    text = "".join(linecache.getlines(filename))
    if not text:
        return None
    tree = _parse(filename, text)
    if tree is None:
        return None
    return text, tree


def _call_name(call: ast.Call) -> Optional[str]:
    match call.func:
        case ast.Name(id=name):
            return name
        case ast.Attribute(attr=name):
            return name
        case _:
            return None


def _is_site(node: ast.Call, site: CallSite) -> bool:
    return (
        node.lineno == site.line
        and node.col_offset == site.col
        and node.end_lineno == site.end_line
        and node.end_col_offset == site.end_col
    )


def _pick(
    calls: list[ast.Call], site: CallSite, func_name: Optional[str]
) -> Optional[ast.Call]:
    """
    Pick the call at a call site out of candidate calls. Falls back to the first call on
    the same line with the expected function name when the exact position is unknown
    or does not line up.
    """
    if site.col is not None:
        for call in calls:
            if _is_site(call, site):
                return call
    if func_name is None:
        return None
    for call in calls:
        if call.lineno == site.line and _call_name(call) == func_name:
            return call
    return None


# Lookups -----------------------------------------------------------------------------#
def call_args(site: CallSite, func_name: Optional[str] = None) -> Optional[list[str]]:
    """
    Get the source text of each positional argument of the call at a call site.

    :param site: Where the call is
    :param func_name: The called function's name, used to pick the call when the
                      column is not known
    :return: One string per positional argument, or None if the source is unavailable
    """
    loaded = _load(site.filename)
    if loaded is None:
        return None
    text, tree = loaded

    calls = [node for node in ast.walk(tree) if isinstance(node, ast.Call)]
    call = _pick(calls, site, func_name)
    if call is None:
        return None
    segments = [ast.get_source_segment(text, arg) for arg in call.args]
    if any(segment is None for segment in segments):
        return None
    return segments


def with_body(site: CallSite, func_name: Optional[str] = None) -> Optional[str]:
    """
    Get the source text of the body of the `with` statement whose context expression
    is the call at a call site.

    :param site: Where the context manager was created
    :param func_name: The called function's name, used to pick the call when the
                      column is not known
    :return: The body's statements joined with '; ', or None if unavailable
    """
    loaded = _load(site.filename)
    if loaded is None:
        return None
    text, tree = loaded

    bodies: dict[int, list[ast.stmt]] = {}
    calls: list[ast.Call] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.With):
            for item in node.items:
                if isinstance(item.context_expr, ast.Call):
                    calls.append(item.context_expr)
                    bodies[id(item.context_expr)] = node.body

    call = _pick(calls, site, func_name)
    if call is None:
        return None
    segments = [ast.get_source_segment(text, stmt) for stmt in bodies[id(call)]]
    if any(segment is None for segment in segments):
        return None
    return "; ".join(segment.strip() for segment in segments)
