"""
Run one program across several execution substrates at once.

Each action goes to the substrate its actor names:

	RubyVM       rendered as a one-action Ruby program and run by an external `ruby`.
	Coordinator  moves values between the substrates through a shared memory.
	(anything)   performed by a simulated mind, which persists for the whole run.

Actions run strictly in program order, whichever substrate they go to.
"""
import subprocess, sys
from collections import Counter
from typing import Callable, Optional
from . import syntax
from .backends.cognitive import Brain
from .codegen import to_ruby
from .diagnostics import Report
from .interpreter import Interpreter
from .ontology import SubstrateUnavailable
from .values import render

RUBY = "RubyVM"
BRAIN = "BrainVM"
COORDINATOR = "Coordinator"

class RubyRunner:
	""" Runs Ruby source text in a fresh interpreter process and returns what it printed. """
	def __init__(self, executable:str="ruby", timeout:Optional[float]=30):
		self.executable = executable
		self.timeout = timeout
	
	def run(self, code:str) -> subprocess.CompletedProcess:
		try:
			return subprocess.run(
				[self.executable, "-e", code],
				capture_output=True, text=True, timeout=self.timeout,
			)
		except FileNotFoundError:
			raise SubstrateUnavailable("Cannot find a Ruby interpreter called %r" % self.executable) from None
		except subprocess.TimeoutExpired:
			raise SubstrateUnavailable("Ruby took longer than %s seconds" % self.timeout) from None
	
	def __call__(self, code:str) -> str:
		return self.run(code).stdout

def substrate_of(action:syntax.Action) -> str:
	return action.actor if action.actor in (RUBY, COORDINATOR) else BRAIN

class Coordinator:
	def __init__(self, runner:Callable[[str], str]=None, report:Report=None, **options):
		self.runner = runner or RubyRunner()
		self.report = report if report is not None else Report(verbose=0)
		self.brain = Brain()
		self.brain_machine = Interpreter(self.brain, report=self.report, **options)
		self.ruby_state = {}
		self.shared_memory = {}
	
	@staticmethod
	def plan(program:syntax.Program) -> dict[str, int]:
		counts = Counter(substrate_of(a) for a in program.actions)
		return {name: counts[name] for name in (RUBY, BRAIN, COORDINATOR)}
	
	def execute(self, program:syntax.Program):
		plan = self.plan(program)
		self.report.info("Execution Plan:")
		for name, count in plan.items():
			self.report.info("   %s: %d operations" % (name, count))
		for action in program.actions:
			substrate = substrate_of(action)
			if substrate == RUBY: self._ruby(action)
			elif substrate == COORDINATOR: self._coordinate(action)
			else: self._brain(action)
	
	def _ruby(self, action:syntax.Action):
		self.report.info("Ruby VM: %s → %s" % (action.op_name, action.target))
		output = self.runner(to_ruby(syntax.Program([action]))).strip()
		if not output:
			return
		try:
			self.ruby_state[action.target] = float(output)
		except ValueError:
			self.ruby_state[action.target] = output
		self.report.info("   Result: %s = %s" % (action.target, render(self.ruby_state[action.target])))
	
	def _brain(self, action:syntax.Action):
		self.report.info("Brain VM: %s → %s" % (action.op_name, action.target))
		self.brain_machine.execute([action])
		if action.target in self.brain_machine.store:
			self.report.info("   Brain stored: %s = %s" % (action.target, render(self.brain_machine.store[action.target])))
	
	def _coordinate(self, action:syntax.Action):
		self.report.info("Coordinator: %s → %s" % (action.op_name, action.target))
		substrates = {BRAIN: self.brain_machine.store, RUBY: self.ruby_state}
		key = action.target
		if action.op is syntax.Operation.Receive:
			source = substrates.get(action.params.get("source"))
			if source is not None and key in source:
				self.shared_memory[key] = source[key]
				self.report.info("   Received: %s = %s" % (key, render(source[key])))
		elif action.op is syntax.Operation.Emit:
			destination = substrates.get(action.params.get("destination"))
			if destination is not None and key in self.shared_memory:
				destination[key] = self.shared_memory[key]
				self.report.info("   Sent: %s = %s" % (key, render(self.shared_memory[key])))
		else:
			self.report.note("Unsupported coordinator operation: "+action.op_name)
	
	def show_results(self, file=None):
		file = file or sys.stdout
		def say(*args): print(*args, file=file)
		say("Final State Across All Substrates:")
		say("─"*60)
		if self.ruby_state:
			say("\nRuby VM State:")
			for key, value in self.ruby_state.items():
				say("   %s = %s" % (key, render(value)))
		say("\nBrain VM State:")
		state = self.brain.state
		if state.beliefs:
			say("   Beliefs:")
			for key, value in state.beliefs.items():
				say("     %s = %s" % (key, render(value)))
		if state.thoughts:
			say("   Thoughts:")
			for thought in state.thoughts:
				say("     * "+thought)
		if state.output:
			say("   Output:")
			for text in state.output:
				say("     > "+text)
		if self.shared_memory:
			say("\nShared Memory:")
			for key, value in self.shared_memory.items():
				say("   %s = %s" % (key, render(value)))
