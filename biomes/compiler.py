"""
Formula compiler.

Turns formula text such as ``If(Less(Depth,0.2),Add(Moisture,0.1),0.0)`` into
instruction trees. There is one builder per result type (number, boolean,
voxel type, voxel shape); they call each other through ``If`` and ``Less``.

Grammar::

    formula := literal | identifier | name "(" formula {"," formula} ")"

Which literals, identifiers and call names are accepted depends on the
result type being built:

==============  ===========================================  ===================
result type     bare forms                                   calls
==============  ===========================================  ===================
number          literal, sampler field, Depth, Moisture,     Add, Subtract, If
                Temperature, Density
boolean         (none)                                       Less
voxel type      (none)                                       Voxel, If
voxel shape     shape name (CUBE, SLAB)                      If
==============  ===========================================  ===================

External names (voxel types, shapes) are resolved here, at compile time, so
a compiled tree never fails during evaluation.
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from biomes.context import VoxelShape
from biomes.errors import (
    BiomeConfigError,
    FormulaSyntaxError,
    MalformedConfigError,
    UnresolvedReferenceError,
    UnresolvedSymbolError,
    UnsupportedInstructionError,
)
from biomes.instructions import (
    Add,
    Const,
    ContextAccessor,
    ContextField,
    If,
    Instruction,
    Less,
    NoiseSample,
    ShapeConst,
    Subtract,
    VoxelLookup,
)
from biomes.params import scan_params

logger = logging.getLogger(__name__)

NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")

CONTEXT_FIELDS = {
    "Depth": ContextField.DEPTH,
    "Moisture": ContextField.MOISTURE,
    "Temperature": ContextField.TEMPERATURE,
    "Density": ContextField.AMBIENT_DENSITY,
    "AmbientDensity": ContextField.AMBIENT_DENSITY,
}

SHAPES = {shape.name: shape for shape in VoxelShape}

SAMPLER_TYPES = ("Simplex", "Formula")

_MISSING = object()

MAX_FRAGMENT_LENGTH = 80


def require_value(document: Mapping[str, Any], key: str, expected_type, what: str = "document"):
    """
    Fetch a required key from a parsed JSON object.

    Raises:
        MalformedConfigError: If the key is missing or has the wrong type
    """
    value = document.get(key, _MISSING)
    if value is _MISSING:
        raise MalformedConfigError(f"Missing required key '{key}' in {what}")
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) and expected_type is not bool:
        value_ok = False
    else:
        value_ok = isinstance(value, expected_type)
    if not value_ok:
        raise MalformedConfigError(
            f"Key '{key}' in {what} has type {type(value).__name__}, "
            f"expected {_type_name(expected_type)}"
        )
    return value


def nesting_error(formula: str) -> FormulaSyntaxError:
    """Error for a formula nested deeper than the builders can recurse."""
    if len(formula) > MAX_FRAGMENT_LENGTH:
        formula = formula[:MAX_FRAGMENT_LENGTH] + "..."
    return FormulaSyntaxError("Formula nested too deeply", formula=formula)


def _type_name(expected_type) -> str:
    if isinstance(expected_type, tuple):
        return " or ".join(t.__name__ for t in expected_type)
    return expected_type.__name__


class FormulaCompiler:
    """
    Compiles the formulas of one biome profile.

    Sampler fields are bound in declaration order with :meth:`bind_sampler`;
    every formula compiled afterwards may refer to them by name and receives
    the already compiled tree itself, not a copy.
    """

    def __init__(self, voxel_types, noise, fields: Optional[Dict[str, Instruction]] = None):
        """
        Args:
            voxel_types: Object with ``get_voxel_by_name(name)`` returning
                something with an ``id`` attribute, or None
            noise: Object with ``sample(position)``, used by Simplex fields
            fields: Initial field bindings
        """
        self.voxel_types = voxel_types
        self.noise = noise
        self.fields: Dict[str, Instruction] = dict(fields or {})

    # ------------------------------------------------------------------
    # Sampler fields
    # ------------------------------------------------------------------

    def bind_samplers(self, samplers: List[Mapping[str, Any]]) -> Dict[str, Instruction]:
        for sampler in samplers:
            if not isinstance(sampler, Mapping):
                raise MalformedConfigError(
                    f"Sampler entries must be objects, got {type(sampler).__name__}"
                )
            self.bind_sampler(sampler)
        return self.fields

    def bind_sampler(self, sampler: Mapping[str, Any]) -> Instruction[float]:
        """
        Compile one entry of the ``Samplers`` list and bind it under its name.

        The field is bound only after its own formula compiled, so a formula
        cannot refer to itself or to fields declared after it.
        """
        name = require_value(sampler, "Name", str, "sampler")
        try:
            if name in self.fields:
                raise MalformedConfigError(f"Sampler field '{name}' is declared twice")

            sampler_type = require_value(sampler, "Type", str, "sampler")
            if sampler_type == "Simplex":
                node = NoiseSample(
                    wavelength=float(require_value(sampler, "Wavelength", (int, float), "sampler")),
                    amplitude=float(require_value(sampler, "Amplitude", (int, float), "sampler")),
                    sampler=self.noise,
                )
            elif sampler_type == "Formula":
                formula = require_value(sampler, "Formula", str, "sampler")
                try:
                    node = self.build_number(formula)
                except RecursionError:
                    raise nesting_error(formula) from None
            else:
                raise UnsupportedInstructionError(
                    f"Sampler type '{sampler_type}' is not supported, "
                    f"expected one of {', '.join(SAMPLER_TYPES)}"
                )
        except BiomeConfigError as e:
            raise e.with_context(field=name)

        self.fields[name] = node
        logger.debug(f"Bound sampler field '{name}' ({type(node).__name__})")
        return node

    # ------------------------------------------------------------------
    # Builders
    # ------------------------------------------------------------------

    def build_number(self, text: str) -> Instruction[float]:
        text = self._clean(text)
        logger.debug(f"Building number instruction: {text}")

        if NUMBER_PATTERN.match(text):
            return Const(float(text))

        if text in self.fields:
            return self.fields[text]

        if "(" not in text:
            if text in CONTEXT_FIELDS:
                return ContextAccessor(CONTEXT_FIELDS[text])
            raise UnresolvedSymbolError(
                f"Unknown symbol '{text}': not a number, sampler field or context value",
                formula=text,
            )

        name, params = self._split_call(text)
        if name == "Add":
            self._expect_arity(name, params, 2, text)
            return Add(self.build_number(params[0]), self.build_number(params[1]))
        if name == "Subtract":
            self._expect_arity(name, params, 2, text)
            return Subtract(self.build_number(params[0]), self.build_number(params[1]))
        if name == "If":
            self._expect_arity(name, params, 3, text)
            return If(
                self.build_boolean(params[0]),
                self.build_number(params[1]),
                self.build_number(params[2]),
            )
        raise UnsupportedInstructionError(
            f"Instruction '{name}' is not supported for number formulas", formula=text
        )

    def build_boolean(self, text: str) -> Instruction[bool]:
        text = self._clean(text)
        logger.debug(f"Building boolean instruction: {text}")

        if "(" not in text:
            raise UnsupportedInstructionError(
                f"Boolean formulas must be a call, got '{text}'", formula=text
            )

        name, params = self._split_call(text)
        if name == "Less":
            self._expect_arity(name, params, 2, text)
            return Less(self.build_number(params[0]), self.build_number(params[1]))
        raise UnsupportedInstructionError(
            f"Instruction '{name}' is not supported for boolean formulas", formula=text
        )

    def build_voxel_type(self, text: str) -> Instruction[int]:
        text = self._clean(text)
        logger.debug(f"Building voxel type instruction: {text}")

        if "(" not in text:
            raise UnsupportedInstructionError(
                f"Voxel type formulas must be a call, got '{text}'", formula=text
            )

        name, params = self._split_call(text)
        if name == "If":
            self._expect_arity(name, params, 3, text)
            return If(
                self.build_boolean(params[0]),
                self.build_voxel_type(params[1]),
                self.build_voxel_type(params[2]),
            )
        if name == "Voxel":
            self._expect_arity(name, params, 1, text)
            voxel = self.voxel_types.get_voxel_by_name(params[0])
            if voxel is None:
                raise UnresolvedReferenceError(
                    f"Voxel type '{params[0]}' is not registered", formula=text
                )
            return VoxelLookup(name=params[0], voxel_id=voxel.id)
        raise UnsupportedInstructionError(
            f"Instruction '{name}' is not supported for voxel type formulas", formula=text
        )

    def build_voxel_shape(self, text: str) -> Instruction[VoxelShape]:
        text = self._clean(text)
        logger.debug(f"Building voxel shape instruction: {text}")

        if "(" not in text:
            if text in SHAPES:
                return ShapeConst(SHAPES[text])
            raise UnresolvedReferenceError(
                f"Shape '{text}' is not defined, expected one of {', '.join(SHAPES)}",
                formula=text,
            )

        name, params = self._split_call(text)
        if name == "If":
            self._expect_arity(name, params, 3, text)
            return If(
                self.build_boolean(params[0]),
                self.build_voxel_shape(params[1]),
                self.build_voxel_shape(params[2]),
            )
        raise UnsupportedInstructionError(
            f"Instruction '{name}' is not supported for voxel shape formulas", formula=text
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _clean(text: str) -> str:
        text = text.strip()
        if not text:
            raise FormulaSyntaxError("Empty formula", formula=text)
        return text

    @staticmethod
    def _split_call(text: str) -> Tuple[str, List[str]]:
        """Split ``Name(a, b)`` into its name and argument texts."""
        name, _, inner = text.partition("(")
        params, end = scan_params(inner)
        if end == -1:
            raise FormulaSyntaxError("Call is missing its closing parenthesis", formula=text)
        trailing = inner[end + 1:].strip()
        if trailing:
            raise FormulaSyntaxError(
                f"Unexpected text '{trailing}' after closing parenthesis", formula=text
            )
        return name.strip(), params

    @staticmethod
    def _expect_arity(name: str, params: List[str], count: int, text: str):
        if len(params) != count:
            raise FormulaSyntaxError(
                f"Instruction '{name}' takes {count} argument(s), got {len(params)}",
                formula=text,
            )
