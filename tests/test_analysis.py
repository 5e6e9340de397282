from pathlib import Path
import unittest

from ucl.analysis import analyze, report_text, describe, nesting, recursive_functions
from ucl.diagnostics import Report
from ucl.document import load_program, program_from_value

base_folder = Path(__file__).parent.parent
examples = base_folder/"examples"

def _example(name):
	return load_program(examples/(name+".json"), Report(verbose=False))

def _define(name, *body):
	return {"actor": "VM", "op": "DefineFunction", "target": name, "params": {"args": ["n"], "body": list(body)}}

def _returning(name):
	return {"actor": "VM", "op": "Return", "target": "result", "params": {"value": {"call": name, "args": {"n": {"var": "n"}}}}}

def _functions(*actions):
	program = program_from_value({"actions": list(actions)})
	return {a.target: a.function for a in program.actions}

class Analysis(unittest.TestCase):
	
	def test_tea(self):
		facts = analyze(_example("tea"))
		self.assertEqual(9, facts.total)
		self.assertEqual(9, facts.nested_total)
		self.assertEqual(("Pour", 2), facts.operations[0])
		self.assertEqual([("cook", 9)], facts.actors)
		self.assertEqual(("kitchen", 9), facts.domains[0])
		self.assertEqual(9, facts.timed)
		self.assertEqual((0.0, 12.0), facts.time_range)
		self.assertEqual(0, facts.max_nesting)
		self.assertEqual([], facts.functions)
	
	def test_factorial(self):
		facts = analyze(_example("factorial"))
		self.assertEqual(3, facts.total)
		self.assertEqual(6, facts.nested_total)
		self.assertEqual(2, facts.max_nesting)
		self.assertEqual(["factorial"], facts.functions)
		self.assertEqual(["factorial"], facts.recursive)
		self.assertIsNone(facts.time_range)
	
	def test_report(self):
		text = report_text(analyze(_example("factorial")))
		self.assertIn("Total actions: 3\n", text)
		self.assertIn("Including nested actions: 6\n", text)
		self.assertIn("  factorial (recursive)", text)
		text = report_text(analyze(_example("tea")))
		self.assertIn("Time range: 0 to 12", text)
		self.assertNotIn("Including nested actions", text)
	
	def test_nesting(self):
		self.assertEqual(0, nesting([]))
		self.assertEqual(1, nesting(_example("counting").actions))

class Recursion(unittest.TestCase):
	
	def test_plain_functions(self):
		functions = _functions(_define("helper"), _define("main", _returning("helper")))
		self.assertEqual([], recursive_functions(functions))
	
	def test_mutual_recursion(self):
		functions = _functions(
			_define("is_even", _returning("is_odd")),
			_define("is_odd", _returning("is_even")),
			_define("helper"),
		)
		self.assertEqual(["is_even", "is_odd"], recursive_functions(functions))
	
	def test_call_actions_count(self):
		functions = _functions(_define("again", {"actor": "VM", "op": "Call", "target": "again"}))
		self.assertEqual(["again"], recursive_functions(functions))
	
	def test_calls_in_conditions_count(self):
		functions = _functions(_define("deep", {
			"actor": "VM", "op": "If", "target": "check", "then": [],
			"condition": {"type": "not", "operand": {"type": "comparison", "op": "==", "left": {"call": "deep"}, "right": 0}},
		}))
		self.assertEqual(["deep"], recursive_functions(functions))
	
	def test_calls_to_strangers_are_ignored(self):
		functions = _functions(_define("lonely", _returning("print")))
		self.assertEqual([], recursive_functions(functions))

class Description(unittest.TestCase):
	
	def test_describe(self):
		text = describe(_example("factorial"))
		self.assertIn("=== Metadata ===", text)
		self.assertIn("=== Actions (3) ===", text)
		self.assertIn("[0] DefineFunction", text)
		self.assertIn("      - Return", text)
		self.assertNotIn("body:", text)


if __name__ == '__main__':
	unittest.main()
