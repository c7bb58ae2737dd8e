# flake8: noqa
import importlib.metadata

from .catalog.context_resolver import ContextResolver, PullContext
from .runtime.batch_orchestrator import BatchOrchestrator
from .runtime.worker import PullerWorker

__version__ = importlib.metadata.version("logpuller")
