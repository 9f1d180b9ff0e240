# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Flaw reporting.

A *flaw* is a problem detected inside a factorization that the caller is
expected to inspect. By default a flaw is logged and computation continues;
in strict mode the flaw is raised as an exception instead.

Example
-------
>>> flaw = flawf("Fac_QR")
>>> flaw("init", "requires m >= n")
False
"""

import logging
import os
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Type

from .exceptions import MatFactError

logger = logging.getLogger("matfact")

_TRUTHY = {"1", "true", "yes", "on"}

_strict: bool = os.environ.get("MATFACT_STRICT", "").strip().lower() in _TRUTHY


def is_strict() -> bool:
    """Return the global strict-mode flag."""
    return _strict


def set_strict(enabled: bool) -> None:
    """Make flaws raise (True) or log and continue (False) by default."""
    global _strict
    _strict = bool(enabled)


@contextmanager
def strict_mode(enabled: bool = True) -> Iterator[None]:
    """Temporarily switch the global strict-mode flag."""
    previous = _strict
    set_strict(enabled)
    try:
        yield
    finally:
        set_strict(previous)


FlawFn = Callable[..., bool]


def flawf(cls_name: str, strict: Optional[bool] = None) -> FlawFn:
    """
    Build the flaw function for one class.

    Parameters
    ----------
    cls_name : str
        Name shown in the log record, e.g. ``"Fac_SVD"``.
    strict : bool | None
        Per-object override of the global strict flag; None defers to
        `is_strict()` at the moment the flaw is reported.

    Returns
    -------
    flaw(method, message, error=MatFactError, **attrs) -> bool
        Logs at ERROR level and returns False, or raises ``error`` built
        from the message and attributes when strict.
    """

    def flaw(
        method: str,
        message: str,
        error: Type[MatFactError] = MatFactError,
        **attrs,
    ) -> bool:
        if _strict if strict is None else strict:
            raise error(f"{cls_name}.{method}: {message}", **attrs)
        logger.error("ERROR @ %s.%s: %s", cls_name, method, message)
        return False

    return flaw
