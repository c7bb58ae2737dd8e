# ruff: noqa
from .puller_options import PullerOptions
