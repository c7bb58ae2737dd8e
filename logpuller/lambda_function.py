"""AWS Lambda entry point, configure the function handler as
``logpuller.lambda_function.handler``.

The worker is built while the module is imported, during the Lambda init
phase, so a bad catalog fails the cold start instead of a batch.
"""
from logpuller.core.options import PullerOptions
from logpuller.core.utils import setup_logging
from logpuller.runtime.lambda_handler import make_handler
from logpuller.runtime.worker import PullerWorker

_options = PullerOptions.from_env()
setup_logging(_options.log_level)

handler = make_handler(PullerWorker.from_options(_options))
