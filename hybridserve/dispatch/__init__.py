from .invocation import INIT_FAILED_MESSAGE, InvocationHandler
from .listener import ListenerState, PersistentListener

__all__ = [
    "INIT_FAILED_MESSAGE",
    "InvocationHandler",
    "ListenerState",
    "PersistentListener",
]
