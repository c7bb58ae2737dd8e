# ruff: noqa
from ._puller import Puller
from .http_json import HTTPJSONPuller
from .registry import PullerRegistry
