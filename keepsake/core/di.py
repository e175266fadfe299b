__all__ = [
    "NotReady",
    "Provide",
    "inject",
]

from dependency_injector.wiring import inject, Provide

from keepsake.lib.sentinel import NotReady
