import functools
import inspect
import logging
import time
from typing import Any, Callable


logger = logging.getLogger('ntg')

_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _safe_repr(x, maxlen=120):
    try:
        r = repr(x)
    except Exception:
        r = '<repr error>'
    if len(r) > maxlen:
        r = r[:maxlen] + '...'
    return r


def log_io(level: int = logging.DEBUG, mask: tuple[str, ...] = ()):
    """
    Log call arguments, the result and the elapsed time of a function.

    Arguments named in ``mask`` are logged as ***. Exceptions are logged
    with their traceback and re-raised.

    :param level: logging level for the call / return lines
    :param mask: argument names whose values are hidden
    """
    def deco(func: Callable):
        qualname = f"{func.__module__}.{func.__qualname__}"
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            if logger.isEnabledFor(level):
                bound = signature.bind_partial(*args, **kwargs)
                arg_repr = [
                    f"{name}={'***' if name in mask else _safe_repr(value)}"
                    for name, value in bound.arguments.items()
                    if name not in ("self", "cls")
                ]
                logger.log(level, "-> %s(%s)", qualname, ", ".join(arg_repr))

            t0 = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("Exception in %s", qualname)
                raise
            dt = (time.perf_counter() - t0) * 1000.0
            if logger.isEnabledFor(level):
                logger.log(level, "<- %s [%0.1f ms] = %s", qualname, dt, _safe_repr(result))
            return result
        return wrapper
    return deco


def level_from_name(value: Any, default: int = logging.INFO) -> int:
    """
    Normalize a level name or number into a logging level.
    Unknown values fall back to ``default``.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        if s.isdigit():
            return int(s)
        name = s.upper()
        if name in _VALID_LEVELS:
            return getattr(logging, name)
    return default
