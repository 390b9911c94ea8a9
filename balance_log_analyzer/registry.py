"""Balance-log source registry and discovery helpers."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from balance_log_analyzer.sources import BalanceLogSource


class BalanceLogSourceRegistry:
    """Singleton class for source-class registration."""

    _source_class_defs: list[type["BalanceLogSource"]] = []

    @classmethod
    def register(cls, class_def: type["BalanceLogSource"]) -> type["BalanceLogSource"]:
        """Register source class for app choices."""
        if class_def not in cls._source_class_defs:
            cls._source_class_defs.append(class_def)
        return class_def

    @classmethod
    def ls(cls) -> list[type["BalanceLogSource"]]:
        """Return registered source classes sorted by display name."""
        return sorted(
            cls._source_class_defs,
            key=lambda class_def: class_def.name().casefold(),
        )
