"""
Argument splitting for formula calls.
"""

from typing import List, Tuple


def scan_params(text: str) -> Tuple[List[str], int]:
    """
    Split the inside of a call into its top-level arguments.

    Args:
        text: Text following the opening parenthesis of a call, up to and
            including its matching closing parenthesis

    Returns:
        Tuple of (trimmed arguments, index of the matching closing parenthesis).
        The index is -1 when the argument list is never closed; in that case
        only the arguments ended by a top-level comma are returned.
    """
    params = []
    current = []
    depth = 0

    for index, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1

        if depth == -1:
            params.append("".join(current).strip())
            return params, index

        if depth == 0 and char == ",":
            params.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    return params, -1


def split_params(text: str) -> List[str]:
    """
    Split the inside of a call into its top-level arguments.

    Commas nested inside inner calls do not split: ``"f(a,b),c)"`` gives
    ``["f(a,b)", "c"]``. Scanning stops at the matching closing parenthesis,
    so anything after it is not part of the result. Callers that need to
    reject such trailing text use :func:`scan_params`.
    """
    params, _ = scan_params(text)
    return params
