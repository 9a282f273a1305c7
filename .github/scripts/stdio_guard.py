#!/usr/bin/env python3

"""
Broken Pipe Guard
-----------------
When the runner stops reading our output (for example a log pipe closed
early), writes to stdout/stderr raise BrokenPipeError. That must never become
the reported failure of a run, so logging handlers and direct prints drop
output once the stream is broken.
"""

import logging
import os
import sys

_stream_broken = False

def is_broken_pipe(error: BaseException) -> bool:
    """True for BrokenPipeError and errors whose message mentions EPIPE."""
    return isinstance(error, BrokenPipeError) or "EPIPE" in str(error)

def stream_broken() -> bool:
    return _stream_broken

def mark_broken() -> None:
    global _stream_broken
    _stream_broken = True

class BrokenPipeSafeHandler(logging.StreamHandler):
    """StreamHandler that goes quiet after its stream reports a broken pipe."""

    def emit(self, record: logging.LogRecord) -> None:
        if _stream_broken:
            return
        super().emit(record)

    def handleError(self, record: logging.LogRecord) -> None:
        error = sys.exc_info()[1]
        if error is not None and is_broken_pipe(error):
            mark_broken()
            return
        super().handleError(record)

def install(level: int = logging.INFO) -> None:
    """Configure root logging with a broken-pipe-safe handler."""
    handler = BrokenPipeSafeHandler()
    handler.setFormatter(logging.Formatter(logging.BASIC_FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=True)

def safe_print(message: str, stream=None) -> None:
    """print() that swallows a broken pipe instead of raising."""
    if _stream_broken:
        return
    stream = stream or sys.stdout
    try:
        print(message, file=stream, flush=True)
    except BrokenPipeError:
        mark_broken()

def silence_stdout() -> None:
    """Point stdout at devnull so interpreter shutdown does not flush into the broken pipe."""
    mark_broken()
    try:
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
    except (OSError, ValueError):
        # stdout may be replaced by an object without a real descriptor
        pass
