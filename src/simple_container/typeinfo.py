"""类型查询模块。

提供容器校验所需的三类查询：具体类是否存在、接口是否存在、
具体类是否在结构上实现了接口。类型标识既可以是类对象，
也可以是点分导入路径字符串（如 ``"package.module.ClassName"``）。
"""
from __future__ import annotations

import importlib
import inspect
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)

TypeIdentity = Any


def _is_missing_path(exc: ImportError, module_name: str) -> bool:
    """导入失败是否只是因为 module_name 本身（或其父包）不存在。"""
    name = exc.name
    if not name:
        return False
    return module_name == name or module_name.startswith(name + ".")


def load_type(identity: TypeIdentity) -> Optional[type]:
    """把类型标识转换为类对象。

    Args:
        identity: 类对象或点分路径字符串。

    Returns:
        类对象；标识无法找到或指向的不是类时返回 None。
    """
    if isinstance(identity, type):
        return identity
    if not isinstance(identity, str) or not identity:
        return None

    parts = identity.split(".")
    # 从最长的模块路径开始尝试，剩余部分按属性逐级查找（支持嵌套类）
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            obj: Any = importlib.import_module(module_name)
        except ImportError as exc:
            if not _is_missing_path(exc, module_name):
                # 模块存在但其内部导入失败，保留真实原因
                raise
            continue
        for attr in parts[split:]:
            obj = getattr(obj, attr, None)
            if obj is None:
                break
        if isinstance(obj, type):
            return obj
        logger.debug("Identity %s does not name a class", identity)
        return None
    return None


def is_protocol(cls: type) -> bool:
    return bool(getattr(cls, "_is_protocol", False))


def is_interface(cls: Any) -> bool:
    """判断类是否为接口形态：Protocol 或含抽象方法的抽象基类。"""
    return isinstance(cls, type) and (is_protocol(cls) or inspect.isabstract(cls))


def is_concrete(cls: Any) -> bool:
    """判断类是否为可实例化的具体类。"""
    return isinstance(cls, type) and not is_interface(cls)


def class_exists(identity: TypeIdentity) -> bool:
    """具体类是否存在。"""
    return is_concrete(load_type(identity))


def interface_exists(identity: TypeIdentity) -> bool:
    """接口是否存在（且为接口形态）。"""
    return is_interface(load_type(identity))


def protocol_members(protocol: type) -> set[str]:
    """收集 Protocol（含其 Protocol 父类）声明的公开成员名。"""
    members: set[str] = set()
    for base in protocol.__mro__:
        if base is object or not is_protocol(base):
            continue
        if base.__module__ == "typing":
            continue
        members.update(name for name in vars(base) if not name.startswith("_"))
        members.update(
            name for name in inspect.get_annotations(base) if not name.startswith("_")
        )
    return members


def _declares_member(cls: type, name: str) -> bool:
    if hasattr(cls, name):
        return True
    return any(name in inspect.get_annotations(klass) for klass in cls.__mro__)


def implements_interface(implementation: TypeIdentity, interface: TypeIdentity) -> bool:
    """检查具体类是否实现了接口。

    抽象基类按 issubclass 判断（包括 ``ABC.register`` 注册的虚拟子类）；
    Protocol 在名义继承之外按结构判断：接口的每个公开成员都必须出现在实现类上。

    Args:
        implementation: 实现类标识。
        interface: 接口标识。

    Returns:
        是否实现。任一标识不存在时返回 False。
    """
    impl = load_type(implementation)
    iface = load_type(interface)
    if impl is None or iface is None:
        return False

    try:
        if issubclass(impl, iface):
            return True
    except TypeError:
        # 未标注 runtime_checkable 的 Protocol 不支持 issubclass
        pass

    if not is_protocol(iface):
        return False
    return all(_declares_member(impl, name) for name in protocol_members(iface))
