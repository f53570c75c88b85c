from .factory import build_application, lifespan
from .handle import ServerHandle
from .initializer import Bootstrap, LazyInitializer, load_registrar

__all__ = [
    "build_application",
    "lifespan",
    "ServerHandle",
    "Bootstrap",
    "LazyInitializer",
    "load_registrar",
]
