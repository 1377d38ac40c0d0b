from .http.model import HTTPRequest, HTTPResponse, HTTPRequestError  # NOQA: F401
from .decorators import on, post  # NOQA: F401
from .config import ServeConfig  # NOQA: F401
from .model import Service, Application, mount  # NOQA: F401
from .server import run  # NOQA: F401
from .selection import Operation, Operations  # NOQA: F401

__version__: str = "1.0.0"

# EOF
