__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'duplex'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .commander import *
from .commands import *
from .faults import *
from .handlers import *
from .inspector import *
from .rendering import *
from .shell import *
from .validation import *

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
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of every module
__all__ += commander.__all__  # type: ignore[attr-defined]
__all__ += commands.__all__  # type: ignore[attr-defined]
__all__ += faults.__all__  # type: ignore[attr-defined]
__all__ += handlers.__all__  # type: ignore[attr-defined]
__all__ += inspector.__all__  # type: ignore[attr-defined]
__all__ += rendering.__all__  # type: ignore[attr-defined]
__all__ += shell.__all__  # type: ignore[attr-defined]
__all__ += validation.__all__  # type: ignore[attr-defined]
