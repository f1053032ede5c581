"""容器对外接口。

依赖类型在注入钩子中声明 ``ContainerInterface`` 参数时，容器注入自身，
以便依赖方进行动态查找。
"""
from __future__ import annotations

from typing import Any, Optional, Protocol


class ContainerInterface(Protocol):
    """容器公开接口。"""

    def register(self, interface: Any, implementation: Any) -> None:
        ...

    def resolve(self, target: Any, *args: Any, **kwargs: Any) -> Any:
        ...

    def resolve_by_interface(self, interface: Any) -> Optional[Any]:
        ...
