import logging
import contextvars
from contextlib import contextmanager

# Fields of the task currently running (execution_id, cluster)
log_context = contextvars.ContextVar("log_context", default={})


class ContextFilter(logging.Filter):
    def filter(self, record):
        for key, value in log_context.get().items():
            # extra= passed at the call site wins
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


@contextmanager
def LoggingContext(logger: logging.Logger, **fields):
    """
    Stamp task fields onto every record logged inside the block.

    Nested blocks add to the outer fields and restore them on exit:

        with LoggingContext(logger, execution_id="exec-123", cluster="analytics"):
            logger.info("GKE.EXECUTE: Fetching credentials")
    """
    token = log_context.set({**log_context.get(), **fields})
    try:
        yield
    finally:
        log_context.reset(token)
