"""
Restricted evaluator for user-supplied profile formulas.

Formulas are single arithmetic expressions over the variables ``x`` (column
position in [-1, 1]), ``f`` (frequency) and ``i`` (column index). Only a fixed
set of math functions and constants is reachable; ``Math.sin`` style names are
accepted alongside bare ``sin``. Expressions are parsed once into a Python AST,
checked against a whitelist, and then walked by a small interpreter. Nothing
is passed to ``eval``.
"""
import ast
import math
import operator
from typing import Callable, Dict, Mapping

MAX_FORMULA_LENGTH = 512
MAX_FORMULA_NODES = 256

VARIABLES = ("x", "f", "i")

CONSTANTS: Dict[str, float] = {
    "pi": math.pi,
    "PI": math.pi,
    "e": math.e,
    "E": math.e,
    "tau": math.tau,
}


def _sign(v: float) -> float:
    return math.copysign(1.0, v) if v != 0 else 0.0


def _clamp(v: float, lo: float, hi: float) -> float:
    return min(max(v, lo), hi)


FUNCTIONS: Dict[str, Callable[..., float]] = {
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "atan2": math.atan2,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "exp": math.exp,
    "log": math.log,
    "log10": math.log10,
    "log2": math.log2,
    "sqrt": math.sqrt,
    "pow": math.pow,
    "hypot": math.hypot,
    "abs": abs,
    "floor": math.floor,
    "ceil": math.ceil,
    "round": round,
    "min": min,
    "max": max,
    "sign": _sign,
    "clamp": _clamp,
}

# Module names a formula may prefix functions/constants with.
_NAMESPACES = ("Math", "math")

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_COMPARE_OPS = {
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
}


class FormulaError(ValueError):
    """A formula could not be compiled or evaluated."""


class CompiledFormula:
    """A validated formula ready for repeated evaluation."""

    def __init__(self, source: str, tree: ast.Expression):
        self.source = source
        self._tree = tree

    def evaluate(self, x: float, f: float, i: float) -> float:
        """Evaluate at one point.

        Raises:
            FormulaError: on any arithmetic failure or a non-finite result.
        """
        env = {"x": float(x), "f": float(f), "i": float(i)}
        try:
            value = float(_eval_node(self._tree.body, env))
        except FormulaError:
            raise
        except (ArithmeticError, ValueError, TypeError) as exc:
            raise FormulaError(f"{type(exc).__name__}: {exc}") from exc
        if not math.isfinite(value):
            raise FormulaError(f"Formula produced a non-finite value: {value}")
        return value

    def __repr__(self) -> str:
        return f"CompiledFormula({self.source!r})"


def compile_formula(source: str) -> CompiledFormula:
    """Parse and validate a formula.

    Raises:
        FormulaError: if the text is empty, too long, not a single
            expression, or uses anything outside the whitelist.
    """
    if not isinstance(source, str) or not source.strip():
        raise FormulaError("Formula is empty")
    if len(source) > MAX_FORMULA_LENGTH:
        raise FormulaError(f"Formula longer than {MAX_FORMULA_LENGTH} characters")

    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as exc:
        raise FormulaError(f"Syntax error: {exc.msg}") from exc
    except (ValueError, RecursionError, MemoryError) as exc:
        raise FormulaError(f"Unparseable formula: {type(exc).__name__}") from exc

    count = 0
    for node in ast.walk(tree):
        count += 1
        if count > MAX_FORMULA_NODES:
            raise FormulaError(f"Formula has more than {MAX_FORMULA_NODES} nodes")
        _check_node(node)

    return CompiledFormula(source, tree)


def evaluate_formula(source: str, x: float, f: float, i: float) -> float:
    """Compile and evaluate in one call."""
    return compile_formula(source).evaluate(x, f, i)


# ─── Validation ──────────────────────────────────────────────────────────────

_ALLOWED_NODES = (
    ast.Expression,
    ast.BinOp,
    ast.UnaryOp,
    ast.Compare,
    ast.IfExp,
    ast.Call,
    ast.Name,
    ast.Attribute,
    ast.Constant,
    ast.Load,
) + tuple(_BINARY_OPS) + tuple(_UNARY_OPS) + tuple(_COMPARE_OPS)


def _check_node(node: ast.AST) -> None:
    if not isinstance(node, _ALLOWED_NODES):
        raise FormulaError(f"Disallowed syntax: {type(node).__name__}")

    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, (int, float)):
            raise FormulaError(f"Disallowed constant: {node.value!r}")
    elif isinstance(node, ast.Name):
        if node.id not in VARIABLES and node.id not in CONSTANTS \
                and node.id not in FUNCTIONS and node.id not in _NAMESPACES:
            raise FormulaError(f"Unknown name: {node.id}")
    elif isinstance(node, ast.Attribute):
        if not (isinstance(node.value, ast.Name) and node.value.id in _NAMESPACES):
            raise FormulaError("Attribute access is limited to Math.<name>")
        if node.attr not in FUNCTIONS and node.attr not in CONSTANTS:
            raise FormulaError(f"Unknown name: {node.value.id}.{node.attr}")
    elif isinstance(node, ast.Call):
        if node.keywords:
            raise FormulaError("Keyword arguments are not allowed")
        if _function_name(node.func) is None:
            raise FormulaError("Only whitelisted functions may be called")


def _function_name(node: ast.AST):
    if isinstance(node, ast.Name) and node.id in FUNCTIONS:
        return node.id
    if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name) \
            and node.value.id in _NAMESPACES and node.attr in FUNCTIONS:
        return node.attr
    return None


# ─── Interpreter ─────────────────────────────────────────────────────────────

def _eval_node(node: ast.AST, env: Mapping[str, float]):
    if isinstance(node, ast.Constant):
        # Floats only, so ** overflows instead of building a bigint.
        return float(node.value)

    if isinstance(node, ast.Name):
        if node.id in env:
            return env[node.id]
        if node.id in CONSTANTS:
            return CONSTANTS[node.id]
        raise FormulaError(f"{node.id} is not a value")

    if isinstance(node, ast.Attribute):
        if node.attr in CONSTANTS:
            return CONSTANTS[node.attr]
        raise FormulaError(f"{node.attr} is not a value")

    if isinstance(node, ast.BinOp):
        left = _eval_node(node.left, env)
        right = _eval_node(node.right, env)
        return _BINARY_OPS[type(node.op)](left, right)

    if isinstance(node, ast.UnaryOp):
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand, env))

    if isinstance(node, ast.Compare):
        left = _eval_node(node.left, env)
        for op, comparator in zip(node.ops, node.comparators):
            right = _eval_node(comparator, env)
            if not _COMPARE_OPS[type(op)](left, right):
                return 0.0
            left = right
        return 1.0

    if isinstance(node, ast.IfExp):
        if _eval_node(node.test, env):
            return _eval_node(node.body, env)
        return _eval_node(node.orelse, env)

    if isinstance(node, ast.Call):
        func = FUNCTIONS[_function_name(node.func)]
        args = [_eval_node(arg, env) for arg in node.args]
        # floor, ceil and round return ints; keep every value a float.
        return float(func(*args))

    raise FormulaError(f"Disallowed syntax: {type(node).__name__}")
