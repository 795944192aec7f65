from ..core.model import EvalResult
from ..core.ports import Executor
from ..core.registry import GLOBAL_NAME, Registry

SNIPPET_FILENAME = "<snipmate>"


class PythonExecutor(Executor):
    """
    Compile a block as its own module-level unit and ``exec`` it once with
    the registry's mapping as globals. Not a sandbox: the block can reach
    anything the interpreter can.

    ``SystemExit`` raised by a block is a block failure like any other;
    only ``KeyboardInterrupt`` escapes.
    """

    def __init__(self, filename: str = SNIPPET_FILENAME):
        self.filename = filename

    def run(self, source: str, registry: Registry) -> EvalResult:
        ns = registry.namespace()
        try:
            code = compile(source, self.filename, "exec")
            exec(code, ns)
        except (Exception, SystemExit) as e:
            return EvalResult.failure(e)
        finally:
            # a top-level ``snipmate = ...`` must not hide the registry from later blocks
            ns[GLOBAL_NAME] = registry
        return EvalResult.success()
