import logging

from .model import EvalResult
from .ports import Executor
from .registry import Registry

logger = logging.getLogger("snipmate.evaluator")


class Evaluator:
    """Run one block against the registry; failures come back as results."""

    def __init__(self, executor: Executor, registry: Registry):
        self.executor = executor
        self.registry = registry

    def evaluate(self, source: str) -> EvalResult:
        try:
            result = self.executor.run(source, self.registry)
        except (Exception, SystemExit) as e:
            # executors are expected to contain failures themselves
            logger.debug("Executor raised instead of reporting", exc_info=True)
            return EvalResult.failure(e)
        return result
