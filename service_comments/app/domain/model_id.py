"""
Model identifier parsing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from shared.errors import InvalidIdentifierError

_SEGMENT = r"[A-Za-z_][A-Za-z0-9_]*"
_NAMESPACE_PATTERN = re.compile(rf"^{_SEGMENT}(\.{_SEGMENT})*$")
_NAME_PATTERN = re.compile(rf"^{_SEGMENT}$")
_VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+(-[A-Za-z0-9_]+)?$")


@dataclass(frozen=True)
class ModelId:
    """Versioned, namespaced model identifier (``namespace:name:version``)."""

    namespace: str
    name: str
    version: str

    @classmethod
    def parse(cls, pretty_format: str) -> "ModelId":
        """Parse the pretty format, raising InvalidIdentifierError when malformed."""
        if not isinstance(pretty_format, str):
            raise InvalidIdentifierError(
                "Model ID must be a string",
                details={"model_id": repr(pretty_format)}
            )

        # Version and name are the last two segments; the namespace keeps the rest
        parts = pretty_format.rsplit(":", 2)
        if len(parts) != 3:
            raise InvalidIdentifierError(
                f"Model ID [{pretty_format}] is not of the form namespace:name:version",
                details={"model_id": pretty_format}
            )

        namespace, name, version = parts
        validate_namespace(namespace)
        if not _NAME_PATTERN.match(name):
            raise InvalidIdentifierError(
                f"Invalid model name [{name}]",
                details={"model_id": pretty_format}
            )
        if not _VERSION_PATTERN.match(version):
            raise InvalidIdentifierError(
                f"Invalid model version [{version}]",
                details={"model_id": pretty_format}
            )

        return cls(namespace=namespace, name=name, version=version)

    @property
    def pretty_format(self) -> str:
        return f"{self.namespace}:{self.name}:{self.version}"

    def __str__(self) -> str:
        return self.pretty_format


def validate_namespace(namespace: str) -> str:
    """Return the namespace if well-formed, else raise InvalidIdentifierError."""
    if not namespace or not _NAMESPACE_PATTERN.match(namespace):
        raise InvalidIdentifierError(
            f"Invalid namespace [{namespace}]",
            details={"namespace": namespace}
        )
    return namespace
