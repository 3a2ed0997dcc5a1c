"""
Protocol module registry and factory.
"""

from __future__ import annotations

import importlib
from collections.abc import Mapping
from typing import Any

from keyless_scraper.errors import UnknownProtocolError
from keyless_scraper.executor import KeylessScraperExecutor
from keyless_scraper.protocol import ProtocolModule


class ProtocolRegistry:
    """
    Protocol registry supporting built-ins and dynamic import paths.
    """

    def __init__(self, registrations: Mapping[str, type[ProtocolModule]] | None = None) -> None:
        builtins: dict[str, type[ProtocolModule]] = {
            KeylessScraperExecutor.protocol_type: KeylessScraperExecutor,
        }
        if registrations:
            builtins.update(
                {key.strip().lower(): value for key, value in registrations.items()}
            )
        self._registrations = builtins

    @property
    def protocol_types(self) -> list[str]:
        return sorted(self._registrations)

    def register(self, *, protocol_type: str, module_class: type[ProtocolModule]) -> None:
        self._registrations[protocol_type.strip().lower()] = module_class

    def create_module(self, protocol: str, **kwargs: Any) -> ProtocolModule:
        """
        Instantiate a module by protocol type or `module.path:ClassName`.
        """

        module_class = self.resolve(protocol)
        return module_class(**kwargs)

    def resolve(self, protocol: str) -> type[ProtocolModule]:
        if ":" in protocol:
            return self._load_dynamic_class(protocol)

        resolved = self._registrations.get(protocol.strip().lower())
        if resolved is None:
            allowed = ", ".join(self.protocol_types)
            raise UnknownProtocolError(
                f"Unknown protocol '{protocol}'. Allowed protocols: {allowed}."
            )
        return resolved

    @staticmethod
    def _load_dynamic_class(path: str) -> type[ProtocolModule]:
        module_path, class_name = path.split(":", 1)
        try:
            module = importlib.import_module(module_path)
        except ImportError as exc:
            raise UnknownProtocolError(f"Unable to import protocol module '{module_path}'.") from exc
        loaded = getattr(module, class_name, None)
        if loaded is None:
            raise UnknownProtocolError(f"Unable to resolve protocol class '{path}'.")
        if not isinstance(loaded, type) or not issubclass(loaded, ProtocolModule):
            raise UnknownProtocolError(f"Class '{path}' must inherit from ProtocolModule.")
        return loaded
