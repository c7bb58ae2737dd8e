# ruff: noqa
from .catalog import LogSourceConfig, ManagedConfig, load_catalog
from .context_resolver import ContextResolver, PullContext
