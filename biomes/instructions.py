"""
Instruction tree nodes.

A compiled formula is a tree of these nodes. The set is closed: the compiler
only ever builds the classes defined here, and picks them so that every
child produces the type its parent expects. Nodes are frozen and hold no
per-call state, so one tree can be shared between formulas and evaluated
from many threads at once.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Tuple, TypeVar

from biomes.context import SampleContext, VoxelShape

T = TypeVar("T")


class Instruction(Generic[T]):
    """Base class for every node of an instruction tree."""

    def evaluate(self, context: SampleContext) -> T:
        raise NotImplementedError


@dataclass(frozen=True)
class Const(Instruction[T]):
    value: Any

    def evaluate(self, context: SampleContext) -> T:
        return self.value


@dataclass(frozen=True)
class Add(Instruction[float]):
    left: Instruction[float]
    right: Instruction[float]

    def evaluate(self, context: SampleContext) -> float:
        return self.left.evaluate(context) + self.right.evaluate(context)


@dataclass(frozen=True)
class Subtract(Instruction[float]):
    left: Instruction[float]
    right: Instruction[float]

    def evaluate(self, context: SampleContext) -> float:
        return self.left.evaluate(context) - self.right.evaluate(context)


@dataclass(frozen=True)
class Less(Instruction[bool]):
    left: Instruction[float]
    right: Instruction[float]

    def evaluate(self, context: SampleContext) -> bool:
        return self.left.evaluate(context) < self.right.evaluate(context)


@dataclass(frozen=True)
class If(Instruction[T]):
    """Select one of two branches; only the selected branch is evaluated."""

    condition: Instruction[bool]
    when_true: Instruction[T]
    when_false: Instruction[T]

    def evaluate(self, context: SampleContext) -> T:
        if self.condition.evaluate(context):
            return self.when_true.evaluate(context)
        return self.when_false.evaluate(context)


@dataclass(frozen=True)
class NoiseSample(Instruction[float]):
    """
    Noise value at the sample position.

    Wavelength and amplitude come from the sampler declaration and are kept
    on the node, but the sampler is queried with the raw position.
    """

    wavelength: float
    amplitude: float
    sampler: Any

    def evaluate(self, context: SampleContext) -> float:
        return self.sampler.sample(context.position)


class ContextField(Enum):
    """Scalar values a formula can read from the sample context."""

    DEPTH = "depth"
    MOISTURE = "moisture"
    TEMPERATURE = "temperature"
    AMBIENT_DENSITY = "density"


@dataclass(frozen=True)
class ContextAccessor(Instruction[float]):
    field: ContextField

    def evaluate(self, context: SampleContext) -> float:
        return getattr(context, self.field.value)


@dataclass(frozen=True)
class VoxelLookup(Instruction[int]):
    """Voxel type id, resolved from its name when the formula was compiled."""

    name: str
    voxel_id: int

    def evaluate(self, context: SampleContext) -> int:
        return self.voxel_id


@dataclass(frozen=True)
class ShapeConst(Instruction[VoxelShape]):
    shape: VoxelShape

    def evaluate(self, context: SampleContext) -> VoxelShape:
        return self.shape


def iter_nodes(root: Instruction) -> Tuple[Instruction, ...]:
    """Return every node reachable from ``root``, each shared node once."""
    seen = {}
    stack = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen[id(node)] = node
        for value in vars(node).values():
            if isinstance(value, Instruction):
                stack.append(value)
    return tuple(seen.values())
