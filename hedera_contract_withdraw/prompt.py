"""Strict yes/no confirmation prompt."""
from __future__ import annotations

import logging
from typing import Callable

_LOGGER = logging.getLogger(__name__)

_YES = {"y", "yes"}
_NO = {"n", "no"}


def confirm(question: str, input_fn: Callable[[str], str] = input) -> bool:
    """Ask ``question`` until the answer is y/yes or n/no (case-insensitive).

    End of input counts as a decline.
    """

    while True:
        try:
            answer = input_fn(f"{question} [y/n]: ").strip().lower()
        except EOFError:
            _LOGGER.info("No answer on stdin; treating as decline")
            return False
        if answer in _YES:
            return True
        if answer in _NO:
            return False


__all__ = ["confirm"]
