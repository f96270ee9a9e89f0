__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'commandeer'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .models import *
from .schema import *
from .tree import *
from .descriptors import *
from .values import *
from .parser import *
from .router import *
from .engine import *
from .config import *
from .faults import *
from .logs import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the platform models
__all__ += models.__all__  # type: ignore[attr-defined]
# Load the exposed API of the argument schema
__all__ += schema.__all__  # type: ignore[attr-defined]
# Load the exposed API of the command tree
__all__ += tree.__all__  # type: ignore[attr-defined]
# Load the exposed API of the platform descriptors
__all__ += descriptors.__all__  # type: ignore[attr-defined]
# Load the exposed API of the argument values
__all__ += values.__all__  # type: ignore[attr-defined]
# Load the exposed API of the tokenizer
__all__ += parser.__all__  # type: ignore[attr-defined]
# Load the exposed API of the router
__all__ += router.__all__  # type: ignore[attr-defined]
# Load the exposed API of the engine
__all__ += engine.__all__  # type: ignore[attr-defined]
# Load the exposed API of the configuration
__all__ += config.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the logging setup
__all__ += logs.__all__  # type: ignore[attr-defined]
