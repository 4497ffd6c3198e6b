from ._async_helper import bounded, gather_settled, run_async, run_sync
from ._component import Component, load_provider
from ._decorators import operation
from ._log_helper import configure_logging, get_logger
from ._operation import Operation
from ._provider import Provider
from ._response import Response
from ._yaml_loader import YamlLoader
from .data_model import DataModel, DataModelField

__all__ = [
    "Component",
    "DataModel",
    "DataModelField",
    "Operation",
    "Provider",
    "Response",
    "YamlLoader",
    "bounded",
    "configure_logging",
    "gather_settled",
    "get_logger",
    "load_provider",
    "operation",
    "run_async",
    "run_sync",
]
