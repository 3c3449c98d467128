import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from analyzer.exceptions import InvalidInput
from catalog.records import Category, ComponentRecord

logger = logging.getLogger(__name__)

# A part scoring more than 35% below its counterpart throttles it
THRESHOLD = 0.35
# RAM is compared against the combined CPU+GPU score
RAM_CAPACITY_RATIO = 0.8

NO_BOTTLENECK_MESSAGE = "No significant bottleneck detected"


class BottleneckKind(str, Enum):
    CPU = "CPU"
    GPU = "GPU"
    RAM = "RAM"
    NONE = "None"


@dataclass(frozen=True)
class BottleneckVerdict:
    kind: BottleneckKind
    component: Optional[ComponentRecord] = None
    severity_percent: Optional[float] = None
    message: str = ""

    @property
    def is_bottleneck(self) -> bool:
        return self.kind is not BottleneckKind.NONE

    def to_dict(self) -> dict:
        return {
            "bottleneck": self.kind.value if self.is_bottleneck else None,
            "details": self.component.to_dict() if self.component else None,
            "bottleneck_pct": self.severity_percent,
            "message": self.message,
        }


def _no_bottleneck() -> BottleneckVerdict:
    return BottleneckVerdict(BottleneckKind.NONE, message=NO_BOTTLENECK_MESSAGE)


def _verdict(kind: BottleneckKind, component, gap: float, reference: float):
    severity = gap / reference * 100
    return BottleneckVerdict(
        kind,
        component=component,
        severity_percent=severity,
        message=f"{component.model} limits this build by {severity:.1f}%",
    )


def _check_slot(record, category: Category, required: bool):
    if record is None:
        if required:
            raise InvalidInput("Please provide CPU and GPU models")
        return
    if not isinstance(record, ComponentRecord):
        raise InvalidInput(f"Expected a {category.value} record, got {record!r}")
    if record.category is not category:
        raise InvalidInput(
            f"{record.model} is a {record.category.value}, not a {category.value}"
        )


# --- Decision list ---
def analyze(cpu, gpu, ram=None) -> BottleneckVerdict:
    """Classify which of CPU, GPU or RAM limits the build.

    Rules are checked in order and the first match wins: CPU far below GPU,
    GPU far below CPU, then RAM below 80% of CPU+GPU. A zero reference score
    means there is nothing to compare against and yields no bottleneck.
    """
    _check_slot(cpu, Category.CPU, required=True)
    _check_slot(gpu, Category.GPU, required=True)
    _check_slot(ram, Category.RAM, required=False)

    cpu_s = cpu.benchmark
    gpu_s = gpu.benchmark

    if gpu_s > 0 and cpu_s < gpu_s * (1 - THRESHOLD):
        verdict = _verdict(BottleneckKind.CPU, cpu, gpu_s - cpu_s, gpu_s)
    elif cpu_s > 0 and gpu_s < cpu_s * (1 - THRESHOLD):
        verdict = _verdict(BottleneckKind.GPU, gpu, cpu_s - gpu_s, cpu_s)
    elif (
        ram is not None
        and cpu_s + gpu_s > 0
        and ram.benchmark < (cpu_s + gpu_s) * RAM_CAPACITY_RATIO
    ):
        combined = cpu_s + gpu_s
        verdict = _verdict(BottleneckKind.RAM, ram, combined - ram.benchmark, combined)
    else:
        verdict = _no_bottleneck()

    logger.debug(
        "cpu=%s gpu=%s ram=%s -> %s (%s)",
        cpu.model,
        gpu.model,
        ram.model if ram is not None else "-",
        verdict.kind.value,
        verdict.severity_percent,
    )
    return verdict


def analyze_models(catalog, cpu_model, gpu_model, ram_model=None) -> BottleneckVerdict:
    """Resolve model names through ``catalog`` and analyze them.

    A RAM name that is not in the catalog is ignored, the same as giving none.
    """
    cpu_model = str(cpu_model or "").strip()
    gpu_model = str(gpu_model or "").strip()
    if not cpu_model or not gpu_model:
        raise InvalidInput("Please provide CPU and GPU models")

    cpu = catalog.get(Category.CPU, cpu_model)
    if cpu is None:
        raise InvalidInput(f'CPU model "{cpu_model}" not found')
    gpu = catalog.get(Category.GPU, gpu_model)
    if gpu is None:
        raise InvalidInput(f'GPU model "{gpu_model}" not found')

    ram = catalog.get(Category.RAM, ram_model) if ram_model else None
    if ram_model and ram is None:
        logger.info('RAM model "%s" not found, analyzing without RAM', ram_model)
    return analyze(cpu, gpu, ram)
