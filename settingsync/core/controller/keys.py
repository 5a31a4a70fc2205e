from __future__ import annotations


class InvalidKeyError(ValueError):
    pass


def meta_namespace_key(obj: object) -> str:
    """Build the queue key of a namespaced object: ``namespace/name`` or ``name``."""
    name = getattr(obj, "name", None)
    if not isinstance(name, str) or not name:
        raise InvalidKeyError(f"object has no name: {obj!r}")

    namespace = getattr(obj, "namespace", "") or ""
    if not isinstance(namespace, str):
        raise InvalidKeyError(f"object has an invalid namespace: {obj!r}")
    return f"{namespace}/{name}" if namespace else name


def split_meta_namespace_key(key: str) -> tuple[str, str]:
    match key.split("/"):
        case [name]:
            return "", name
        case [namespace, name]:
            return namespace, name
        case _:
            raise InvalidKeyError(f"unexpected key format: {key!r}")
