"""
Expressions and conditions, evaluated against a machine.

The machine is anything with a `store` (a dict of variable bindings)
and a `call(name, args)` method that runs a user-defined function.
In practice that's the Interpreter, but the evaluator does not care.
"""
import math
from . import syntax
from .ontology import UnboundVariable, TypeMismatch, DivideByZero
from .values import VALUE, as_number, same_value, render

def evaluate(expr:syntax.Expression, machine) -> VALUE:
	try: fn = EVALUATE[type(expr)]
	except KeyError: raise NotImplementedError(type(expr), expr)
	return fn(expr, machine)

def test(cond:syntax.Condition, machine) -> bool:
	try: fn = TEST[type(cond)]
	except KeyError: raise NotImplementedError(type(cond), cond)
	return fn(cond, machine)

def _eval_literal(expr:syntax.Literal, machine):
	return expr.value

def _eval_variable(expr:syntax.Variable, machine):
	try: return machine.store[expr.name]
	except KeyError: raise UnboundVariable(expr.name) from None

def _eval_binary_op(expr:syntax.BinaryOp, machine):
	lhs = evaluate(expr.left, machine)
	rhs = evaluate(expr.right, machine)
	return arithmetic(expr.op, lhs, rhs)

def _eval_call(expr:syntax.Call, machine):
	return machine.call(expr.name, expr.args)

def arithmetic(op:str, lhs:VALUE, rhs:VALUE) -> float:
	a, b = as_number(lhs), as_number(rhs)
	if a is None or b is None:
		raise TypeMismatch("Cannot apply %s to %s and %s" % (op, render(lhs), render(rhs)))
	if op in ("/", "%") and b == 0:
		raise DivideByZero()
	return OPS[op](a, b)

OPS = {
	"+": lambda a, b: a + b,
	"-": lambda a, b: a - b,
	"*": lambda a, b: a * b,
	"/": lambda a, b: a / b,
	"%": lambda a, b: math.nan if math.isinf(a) else math.fmod(a, b),
}

def _test_comparison(cond:syntax.Comparison, machine):
	lhs = evaluate(cond.left, machine)
	rhs = evaluate(cond.right, machine)
	return compare(cond.op, lhs, rhs)

def _test_and(cond:syntax.And, machine):
	return all(test(c, machine) for c in cond.operands)

def _test_or(cond:syntax.Or, machine):
	return any(test(c, machine) for c in cond.operands)

def _test_not(cond:syntax.Not, machine):
	return not test(cond.operand, machine)

def compare(op:str, lhs:VALUE, rhs:VALUE) -> bool:
	""" Equality is structural. Ordering is only for numbers; anything else is simply false. """
	if op == "==": return same_value(lhs, rhs)
	if op == "!=": return not same_value(lhs, rhs)
	a, b = as_number(lhs), as_number(rhs)
	if a is None or b is None: return False
	return ORDER[op](a, b)

ORDER = {
	"<": lambda a, b: a < b,
	"<=": lambda a, b: a <= b,
	">": lambda a, b: a > b,
	">=": lambda a, b: a >= b,
}

EVALUATE = {}
TEST = {}
for _k, _v in list(globals().items()):
	if _k.startswith("_eval_"):
		EVALUATE[_v.__annotations__["expr"]] = _v
	elif _k.startswith("_test_"):
		TEST[_v.__annotations__["cond"]] = _v
