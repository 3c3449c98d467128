import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from catalog.exceptions import UnknownCategory


class Category(str, Enum):
    CPU = "CPU"
    GPU = "GPU"
    RAM = "RAM"

    @classmethod
    def parse(cls, value) -> "Category":
        """Normalize "cpu" / "Cpu" / Category.CPU to the enum member."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().upper()
        try:
            return cls(key)
        except ValueError:
            raise UnknownCategory(
                f'Unknown component type "{value}". Use "cpu", "gpu" or "ram"'
            ) from None

    @property
    def plural(self) -> str:
        return self.value.lower() + "s"


@dataclass(frozen=True)
class ComponentRecord:
    category: Category
    model: str
    benchmark: float
    url: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "category", Category.parse(self.category))

        model = str(self.model or "").strip()
        if not model:
            raise ValueError("Component model must not be empty")
        object.__setattr__(self, "model", model)

        benchmark = float(self.benchmark)
        if not math.isfinite(benchmark) or benchmark < 0:
            raise ValueError(
                f"Benchmark for {model} must be a non-negative number, got {self.benchmark!r}"
            )
        object.__setattr__(self, "benchmark", benchmark)

        url = str(self.url).strip() if self.url is not None else ""
        object.__setattr__(self, "url", url or None)

    def to_dict(self) -> dict:
        return {
            "type": self.category.value,
            "model": self.model,
            "benchmark": self.benchmark,
            "url": self.url,
        }
