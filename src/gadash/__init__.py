from importlib.metadata import PackageNotFoundError, version

from gadash.errors import ApiError, ChartError, MalformedResponseError, NoDataError
from gadash.gate import RenderGate

try:
    __version__ = version("gadash")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

__all__ = [
    "ApiError",
    "ChartError",
    "MalformedResponseError",
    "NoDataError",
    "RenderGate",
    "__version__",
]
