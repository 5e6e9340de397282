from pathlib import Path
import unittest

from ucl.backends.base import EffectHandler
from ucl.backends.cognitive import Brain
from ucl.diagnostics import Report
from ucl.document import load_program, program_from_value
from ucl.interpreter import Interpreter, run_program, UNWIND, TOP_LEVEL, MAX_ITERATIONS
from ucl.ontology import (
	UnboundVariable, UnknownFunction, NonIntegerBound, LoopLimitExceeded, RecursionLimitExceeded,
)
from ucl.values import render

base_folder = Path(__file__).parent.parent
examples = base_folder/"examples"

class Recorder(EffectHandler):
	""" Binds variables and writes down what gets emitted. Nothing else. """
	def __init__(self):
		self.emitted = []
	def perform_Bind(self, action, store):
		store[action.target] = self.evaluate_param(action.params["value"])
	perform_Assign = perform_Bind
	def perform_Emit(self, action, store):
		self.emitted.append(render(self.evaluate_param(action.params.get("content", action.target))))

def _program(*actions):
	return program_from_value({"actions": list(actions)})

def _act(op, target, **fields):
	return dict(actor="VM", op=op, target=target, **fields)

def _bind(name, value):
	return _act("Bind", name, params={"value": value})

def _emit(content):
	return _act("Emit", "output", params={"content": content})

def _var(name): return {"var": name}
def _expr(op, left, right): return {"expr": {"op": op, "left": left, "right": right}}
def _cmp(op, left, right): return {"type": "comparison", "op": op, "left": left, "right": right}
def _call(name, **args): return {"call": name, "args": args}
def _define(name, params, *body): return _act("DefineFunction", name, params={"args": params, "body": list(body)})
def _return(value): return _act("Return", "result", params={"value": value})

def _run(program, handler=None, **options):
	handler = handler or Recorder()
	report = Report(verbose=False)
	machine = run_program(program, handler, report=report, **options)
	return machine, handler, report

class Examples(unittest.TestCase):
	
	def _example(self, name):
		report = Report(verbose=False)
		return load_program(examples/(name+".json"), report)
	
	def test_factorial(self):
		machine, brain, report = _run(self._example("factorial"), Brain())
		self.assertEqual(120.0, machine.store["answer"])
		self.assertEqual(["120"], brain.state.output)
		self.assertEqual([], report.notes)
	
	def test_factorial_with_legacy_return(self):
		machine, brain, report = _run(self._example("factorial"), Brain(), return_policy=TOP_LEVEL)
		self.assertIsNone(machine.store["answer"])
		self.assertEqual("null", brain.state.output[-1])
		self.assertEqual(["Unsupported operation: Return (while performing Return on 'result')"], report.notes)
	
	def test_fibonacci(self):
		machine, brain, report = _run(self._example("fibonacci"), Brain())
		self.assertEqual(["0", "1", "1", "2", "3", "5", "8", "13", "21", "34", "55"], brain.state.output)
		self.assertEqual(10.0, machine.store["i"])
	
	def test_counting(self):
		machine, brain, report = _run(self._example("counting"), Brain())
		self.assertEqual(6.0, machine.store["total"])
		self.assertEqual(3.0, machine.store["i"])
		self.assertEqual(0.0, machine.store["countdown"])
		self.assertEqual(["3", "2", "1", "6"], brain.state.output)
	
	def test_confusion_is_not_fatal(self):
		machine, brain, report = _run(self._example("confusion_test"), Brain())
		self.assertEqual(4, len(report.notes))
		self.assertIn("Teleport", report.notes[-1])
		self.assertEqual("Hello!", brain.state.output[0])
		self.assertEqual("Goodbye!", brain.state.output[-1])
		self.assertAlmostEqual(1.6, brain.state.emotions["confusion"])
		self.assertAlmostEqual(0.3, brain.state.emotions["warmth"])

class Functions(unittest.TestCase):
	
	def test_call_from_outside(self):
		machine, _, _ = _run(_program(_define("square", ["x"], _return(_expr("*", _var("x"), _var("x"))))))
		self.assertEqual(49.0, machine.call("square", {"x": 7}))
	
	def test_return_unwinds_from_loops(self):
		program = _program(
			_define("first_over", ["limit"],
				_bind("k", 0),
				_act("While", "search", condition=_cmp("<", 0, 1), body=[
					_act("Assign", "k", params={"value": _expr("+", _var("k"), 1)}),
					_act("If", "found", condition=_cmp(">", _var("k"), _var("limit")), then=[_return(_var("k"))]),
				]),
				_return(-1),
			),
			_bind("answer", _call("first_over", limit=3)),
		)
		machine, _, _ = _run(program)
		self.assertEqual(4.0, machine.store["answer"])
		self.assertEqual(0, machine.depth)
	
	def test_function_without_return_yields_null(self):
		machine, _, _ = _run(_program(_define("nothing", []), _bind("x", _call("nothing"))))
		self.assertIsNone(machine.store["x"])
	
	def test_parameters_are_restored(self):
		program = _program(
			_bind("n", 99),
			_define("bump", ["n"], _bind("seen", _var("n")), _return(_expr("+", _var("n"), 1))),
			_bind("answer", _call("bump", n=1)),
		)
		machine, _, _ = _run(program)
		self.assertEqual(2.0, machine.store["answer"])
		self.assertEqual(99.0, machine.store["n"])
		self.assertEqual(1.0, machine.store["seen"])
	
	def test_fresh_parameters_stay_bound(self):
		program = _program(_define("id", ["q"], _return(_var("q"))), _bind("answer", _call("id", q=5)))
		machine, _, _ = _run(program)
		self.assertEqual(5.0, machine.store["q"])
	
	def test_arguments_are_evaluated_before_binding(self):
		program = _program(
			_bind("a", 1),
			_define("pair", ["a", "b"], _return(_expr("-", _var("a"), _var("b")))),
			_bind("answer", _call("pair", a=10, b=_var("a"))),
		)
		machine, _, _ = _run(program)
		self.assertEqual(9.0, machine.store["answer"])
	
	def test_unknown_function(self):
		with self.assertRaises(UnknownFunction) as cm:
			_run(_program(_bind("x", _call("nope"))))
		self.assertEqual("x", cm.exception.action.target)
	
	def test_runaway_recursion(self):
		program = _program(
			_define("forever", ["n"], _return(_call("forever", n=_expr("+", _var("n"), 1)))),
			_bind("x", _call("forever", n=0)),
		)
		machine = Interpreter(Recorder())
		with self.assertRaises(RecursionLimitExceeded):
			machine.execute(program)
		self.assertNotIn("x", machine.store)
		self.assertEqual(0, machine.depth)
	
	def test_top_level_return_halts_body(self):
		program = _program(
			_define("early", [], _bind("before", 1), _return(5), _bind("after", 2)),
			_bind("answer", _call("early")),
		)
		for policy in (UNWIND, TOP_LEVEL):
			with self.subTest(policy):
				machine, _, _ = _run(program, return_policy=policy)
				self.assertEqual(5.0, machine.store["answer"])
				self.assertEqual(1.0, machine.store["before"])
				self.assertNotIn("after", machine.store)
	
	def test_nested_return_does_not_halt_under_legacy_policy(self):
		program = _program(
			_define("late", [],
				_act("If", "always", condition=_cmp("==", 1, 1), then=[_return(1)]),
				_bind("after", 2),
				_return(3),
			),
			_bind("answer", _call("late")),
		)
		machine, _, report = _run(program, return_policy=TOP_LEVEL)
		self.assertEqual(3.0, machine.store["answer"])
		self.assertEqual(2.0, machine.store["after"])
		self.assertEqual(1, len(report.notes))
		machine, _, report = _run(program)
		self.assertEqual(1.0, machine.store["answer"])
		self.assertNotIn("after", machine.store)
		self.assertEqual([], report.notes)
	
	def test_recursion_limit_is_adjustable(self):
		factorial = load_program(examples/"factorial.json", Report(verbose=False))
		machine, _, _ = _run(factorial, Brain(), max_depth=20)
		self.assertEqual(120.0, machine.store["answer"])
		with self.assertRaises(RecursionLimitExceeded) as cm:
			_run(factorial, Brain(), max_depth=5)
		self.assertIsNotNone(cm.exception.action)
	
	def test_return_outside_a_function_is_just_an_action(self):
		machine, _, report = _run(_program(_return(1), _emit("after")))
		self.assertEqual(1, len(report.notes))
	
	def test_return_policy_must_be_known(self):
		with self.assertRaises(ValueError):
			Interpreter(Recorder(), return_policy="sideways")

class Loops(unittest.TestCase):
	
	def test_for_is_inclusive(self):
		program = _program(_act("For", "loop", loop_var="i", **{"from": 1, "to": 3}, body=[_emit(_var("i"))]))
		machine, recorder, _ = _run(program)
		self.assertEqual(["1", "2", "3"], recorder.emitted)
		self.assertEqual(3.0, machine.store["i"])
	
	def test_empty_for(self):
		program = _program(_act("For", "loop", loop_var="i", **{"from": 3, "to": 1}, body=[_emit(_var("i"))]))
		machine, recorder, _ = _run(program)
		self.assertEqual([], recorder.emitted)
		self.assertNotIn("i", machine.store)
	
	def test_for_bounds_must_be_integers(self):
		for bogon in [1.5, "1", True]:
			with self.subTest(bogon=bogon):
				program = _program(_act("For", "loop", loop_var="i", **{"from": bogon, "to": 3}, body=[]))
				with self.assertRaises(NonIntegerBound):
					_run(program)
	
	def test_for_bounds_may_be_expressions(self):
		program = _program(_bind("n", 2), _act("For", "loop", loop_var="i", **{"from": 1, "to": _expr("*", _var("n"), 2)}, body=[_emit(_var("i"))]))
		_, recorder, _ = _run(program)
		self.assertEqual(4, len(recorder.emitted))
	
	def test_while_may_run_the_limit(self):
		program = _program(
			_bind("n", 0),
			_act("While", "loop", condition=_cmp("<", _var("n"), MAX_ITERATIONS), body=[
				_act("Assign", "n", params={"value": _expr("+", _var("n"), 1)}),
			]),
		)
		machine, _, _ = _run(program)
		self.assertEqual(float(MAX_ITERATIONS), machine.store["n"])
	
	def test_while_may_not_exceed_the_limit(self):
		program = _program(
			_bind("n", 0),
			_act("While", "loop", condition=_cmp(">=", _var("n"), 0), body=[
				_act("Assign", "n", params={"value": _expr("+", _var("n"), 1)}),
			]),
		)
		machine = Interpreter(Recorder())
		with self.assertRaises(LoopLimitExceeded):
			machine.execute(program)
		self.assertEqual(float(MAX_ITERATIONS), machine.store["n"])
	
	def test_string_never_equals_number(self):
		program = _program(
			_bind("x", "5"),
			_act("If", "check", condition=_cmp("==", _var("x"), 5), then=[_emit("same")], **{"else": [_emit("different")]}),
		)
		_, recorder, _ = _run(program)
		self.assertEqual(["different"], recorder.emitted)

class Forgiveness(unittest.TestCase):
	
	def _program(self):
		return _program(_emit("before"), _bind("x", _var("missing")), _emit("after"))
	
	def test_strict(self):
		with self.assertRaises(UnboundVariable):
			_run(self._program())
	
	def test_forgiving(self):
		machine, recorder, report = _run(self._program(), forgiving=True)
		self.assertEqual(["before", "after"], recorder.emitted)
		self.assertEqual(1, len(report.notes))
		self.assertTrue(report.notes[0].startswith("Skipped:"))


if __name__ == '__main__':
	unittest.main()
