from typing import Any, Callable, Dict, Optional

from logpuller.runtime.worker import PullerWorker

LambdaHandler = Callable[[Dict[str, Any], Any], Optional[Dict[str, Any]]]


def make_handler(worker: PullerWorker) -> LambdaHandler:
    def handler(event: Dict[str, Any], context: Any) -> Optional[Dict[str, Any]]:
        return worker.handle(event)

    return handler
