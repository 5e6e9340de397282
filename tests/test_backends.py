from pathlib import Path
import random, unittest

from ucl.backends.cognitive import Brain, WORKING_MEMORY_SPAN
from ucl.backends.physical import Robot, BOILING
from ucl.backends.knowledge import MockLanguageModel, load_knowledge
from ucl.diagnostics import Report
from ucl.document import load_program, program_from_value
from ucl.interpreter import run_program
from ucl.ontology import DivideByZero, NoKnowledge, MalformedAction

base_folder = Path(__file__).parent.parent
examples = base_folder/"examples"

def _example(name):
	return load_program(examples/(name+".json"), Report(verbose=False))

def _program(*actions):
	return program_from_value({"actions": [dict(actor="someone", **a) for a in actions]})

def _run(program, handler):
	report = Report(verbose=False)
	machine = run_program(program, handler, report=report)
	return machine, report

class TheBrain(unittest.TestCase):
	
	def test_facts_become_beliefs(self):
		brain = Brain()
		machine, _ = _run(_program({"op": "StoreFact", "target": "tea", "params": {"color": "green", "hot": True}}), brain)
		self.assertEqual("green", machine.store["tea.color"])
		self.assertIs(True, brain.state.beliefs["tea.hot"])
		self.assertEqual(["The tea has properties: color, hot"], brain.state.working_memory)
	
	def test_arithmetic(self):
		brain = Brain()
		machine, _ = _run(_program(
			{"op": "Bind", "target": "x", "params": {"value": 5}},
			{"op": "Write", "target": "y", "params": {"lhs_register": "x", "rhs": 2, "operation": "multiply"}},
			{"op": "Write", "target": "z", "params": {"lhs_register": "y", "rhs_register": "nowhere", "operation": "subtract"}},
		), brain)
		self.assertEqual(10.0, machine.store["y"])
		self.assertEqual(10.0, machine.store["z"])
		self.assertIn("Calculated: y = 5 × 2 = 10", brain.state.thoughts)
	
	def test_strange_operation_multiplies(self):
		machine, _ = _run(_program(
			{"op": "Write", "target": "y", "params": {"lhs": 3, "rhs": 4, "operation": ["add"]}},
		), Brain())
		self.assertEqual(12.0, machine.store["y"])
	
	def test_division_by_zero(self):
		program = _program(
			{"op": "Bind", "target": "x", "params": {"value": 1}},
			{"op": "Write", "target": "y", "params": {"lhs_register": "x", "rhs": 0, "operation": "divide"}},
		)
		with self.assertRaises(DivideByZero):
			_run(program, Brain())
	
	def test_random_numbers(self):
		brain = Brain(rng=random.Random(1234))
		machine, _ = _run(_program({"op": "GenRandomInt", "target": "die", "params": {"min": 1, "max": 6}}), brain)
		self.assertIsInstance(machine.store["die"], float)
		self.assertTrue(1 <= machine.store["die"] <= 6)
	
	def test_bad_random_range(self):
		with self.assertRaises(MalformedAction):
			_run(_program({"op": "GenRandomInt", "target": "die", "params": {"min": 6, "max": 1}}), Brain())
	
	def test_working_memory_is_small(self):
		brain = Brain()
		_run(_program(*[{"op": "Receive", "target": "word %d" % i} for i in range(10)]), brain)
		self.assertEqual(WORKING_MEMORY_SPAN, len(brain.state.working_memory))
		self.assertEqual("Heard: word 9", brain.state.working_memory[-1])
		self.assertEqual("word 9", brain.state.attention)
	
	def test_goals_and_obligations(self):
		brain = Brain()
		_run(_program(
			{"op": "Decide", "target": "plan", "params": {"choice": "make tea", "goal": "drink tea"}},
			{"op": "Oblige", "target": "self", "params": {"duty": "wash the cup"}},
		), brain)
		self.assertEqual(["drink tea", "Must: wash the cup"], brain.state.goals)
		self.assertIn("Decided to: make tea", brain.state.thoughts)
		self.assertEqual(0.5, brain.state.emotions["responsibility"])
	
	def test_kitchen_work_is_imagined(self):
		brain = Brain()
		_run(_example("tea"), brain)
		self.assertIn("Performing action: Pouring water from tap into kettle (250ml)", brain.state.thoughts)
		self.assertEqual(9, len(brain.state.trace))
	
	def test_display(self):
		brain = Brain()
		_run(_example("confusion_test"), brain)
		text = brain.state.display()
		self.assertIn("=== Brain State ===", text)
		self.assertIn("confusion: 1.60", text)
		self.assertIn("  * Sorry, I don't know what that means: Flurble", text)

class TheRobot(unittest.TestCase):
	
	def test_making_tea(self):
		robot = Robot()
		_, report = _run(_example("tea"), robot)
		state = robot.state
		self.assertEqual([], state.errors)
		self.assertEqual([], report.notes)
		self.assertEqual(9, len(state.log))
		self.assertEqual(BOILING, state.objects["water"].temperature)
		self.assertEqual("boiling", state.objects["water"].phase)
		self.assertEqual({"water": BOILING}, state.temperatures)
		self.assertEqual("tea_bag", state.gripper)
		self.assertIsNone(state.objects["tea_bag"].container)
		self.assertEqual("Placed tea_bag into cup", state.log[3])
	
	def test_confusion(self):
		robot = Robot()
		_, report = _run(_example("confusion_test"), robot)
		self.assertEqual(4, len(robot.state.errors))
		self.assertEqual("Unsupported operation: Flurble", robot.state.errors[0])
		self.assertEqual(["Output: Hello!", "Output: Goodbye!"], robot.state.log)
		self.assertEqual(4, len(report.notes))
	
	def test_display(self):
		robot = Robot()
		_run(_example("tea"), robot)
		text = robot.state.display()
		self.assertIn("Gripper: Holding tea_bag", text)
		self.assertIn("  water: 100.0°C", text)

class TheModel(unittest.TestCase):
	
	def test_knowledge_base(self):
		knowledge = load_knowledge()
		self.assertEqual({"factorial", "fibonacci", "hello world"}, set(knowledge))
		self.assertEqual("DefineFunction", knowledge["factorial"][0].op_name)
	
	def test_generate_and_execute(self):
		model = MockLanguageModel()
		_run(_example("code_generation"), model)
		state = model.state
		self.assertEqual(["Write a factorial function"], state.prompts)
		self.assertEqual(["fact"], list(state.generated_code))
		self.assertEqual(["fact"], state.executions)
		self.assertIn("Knowledge Base: 3 preloaded tasks", state.display())
	
	def test_no_knowledge(self):
		model = MockLanguageModel(knowledge={})
		with self.assertRaises(NoKnowledge):
			_run(_program({"op": "Generate", "target": "x", "params": {"instruction": "Write a sorting function"}}), model)
		self.assertEqual(["I don't know how to: Write a sorting function"], model.state.responses)
	
	def test_cannot_execute_what_was_never_generated(self):
		with self.assertRaises(NoKnowledge):
			_run(_program({"op": "Execute", "target": "nothing"}), MockLanguageModel(knowledge={}))
	
	def test_instruction_is_required(self):
		with self.assertRaises(MalformedAction):
			_run(_program({"op": "Generate", "target": "x"}), MockLanguageModel(knowledge={}))


if __name__ == '__main__':
	unittest.main()
