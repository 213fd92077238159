from fastapi import APIRouter


class CoreModule:
    """
    Group of endpoints served under `root`, documented under `tag`.

    Every `endpoints_*.py` file of `framehouse/core` exposes one as `core_module`.
    """

    def __init__(
        self,
        root: str,
        tag: str,
        router: APIRouter | None = None,
    ):
        self.root = root
        self.tag = tag
        self.router = router or APIRouter(tags=[tag])


class Module(CoreModule):
    """
    Studio feature built on the core modules, exposed as `module` by the `endpoints_*.py` files of `framehouse/modules`
    """
