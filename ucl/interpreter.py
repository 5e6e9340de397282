"""
The control-flow interpreter.

One engine serves every backend. It owns the variable store and the
function table, handles the compound actions (If, While, For, and
DefineFunction) itself, and hands every leaf action to an effect handler
in program order. What a leaf action *means* is entirely the handler's business.

Function calls do not get their own scope. A call saves whatever values
its parameter names had, binds the arguments over them, runs the body,
and then puts the saved values back. Anything else the body binds stays bound.

There are two policies for Return within a function body:

	"unwind": A Return anywhere within the body (even deep within If/While/For)
		stops the function and yields its value. This is the default.

	"top-level": Only a Return at the top level of the body stops the function.
		A Return nested inside a branch or loop is delivered to the effect handler
		like any other leaf action. This matches the behavior of the first
		generation of UCL tools, and exists for compatibility.

A Return outside of any function call is always just a leaf action.
"""
import sys
from typing import Sequence, Union
from . import syntax
from .syntax import Operation
from .document import expression_from_value
from .diagnostics import Report
from .evaluator import evaluate, test
from .ontology import (
	UCLError, UnknownFunction, NonIntegerBound, LoopLimitExceeded,
	RecursionLimitExceeded, UnsupportedOperation, EVALUATION_ERRORS,
)
from .values import VALUE, as_integer, normalize, render

MAX_DEPTH = 1000
MAX_ITERATIONS = 10_000

UNWIND = "unwind"
TOP_LEVEL = "top-level"
RETURN_POLICIES = (UNWIND, TOP_LEVEL)

# Python frames spent per unit of guard depth, with plenty to spare.
_FRAMES_PER_LEVEL = 12

class RecursionGuard:
	""" Counts nested descents. Use it as a context manager around each descent. """
	def __init__(self, max_depth:int):
		self.max_depth = max_depth
		self.depth = 0
	
	def __enter__(self):
		if self.depth >= self.max_depth:
			raise RecursionLimitExceeded(self.max_depth)
		self.depth += 1
		return self
	
	def __exit__(self, exc_type, exc_val, exc_tb):
		self.depth -= 1

class _Returning(Exception):
	""" Unwinds the Python stack from a Return to the function call it belongs to. """
	def __init__(self, value):
		super().__init__()
		self.value = value


class Interpreter:
	store: dict[str, VALUE]
	functions: dict[str, syntax.FunctionDef]
	
	def __init__(self, handler, *, report:Report=None, max_depth:int=MAX_DEPTH, return_policy:str=UNWIND, forgiving:bool=False):
		if return_policy not in RETURN_POLICIES:
			raise ValueError("return_policy must be one of %r" % (RETURN_POLICIES,))
		self.handler = handler
		self.report = report if report is not None else Report(verbose=0)
		self.guard = RecursionGuard(max_depth)
		self.return_policy = return_policy
		self.forgiving = forgiving
		self.store = {}
		self.functions = {}
		self._active_calls = 0
		handler.link(self)
	
	@property
	def depth(self) -> int: return self.guard.depth
	
	def execute(self, program:Union[syntax.Program, Sequence[syntax.Action]]):
		"""
		Run a whole program from the top. In forgiving mode, a top-level action
		that fails with an evaluation error is reported and skipped.
		Anything else that goes wrong ends the run.
		"""
		actions = program.actions if isinstance(program, syntax.Program) else program
		old_limit = sys.getrecursionlimit()
		sys.setrecursionlimit(max(old_limit, self.guard.max_depth * _FRAMES_PER_LEVEL + 1000))
		try:
			for step, action in enumerate(actions, 1):
				self.report.step(step, action)
				try:
					self.perform(action)
				except EVALUATION_ERRORS as ex:
					if not self.forgiving: raise
					self.report.skipped(ex)
		finally:
			sys.setrecursionlimit(old_limit)
	
	def run(self, actions:Sequence[syntax.Action]):
		for action in actions:
			self.perform(action)
	
	def perform(self, action:syntax.Action):
		try:
			op = action.op
			if op is Operation.If: self._do_if(action)
			elif op is Operation.While: self._do_while(action)
			elif op is Operation.For: self._do_for(action)
			elif op is Operation.DefineFunction: self._do_define(action)
			elif op is Operation.Return and self._active_calls and self.return_policy == UNWIND:
				raise _Returning(self._return_value(action))
			else: self._do_leaf(action)
		except UCLError as ex:
			raise ex.blame(action)
	
	def evaluate(self, expr:syntax.Expression) -> VALUE:
		return evaluate(expr, self)
	
	def test(self, cond:syntax.Condition) -> bool:
		return test(cond, self)
	
	def call(self, name:str, args:dict) -> VALUE:
		"""
		Call a user-defined function. Argument expressions are evaluated in the
		order the function declares its parameters, followed by any extras in
		written order, all before any is bound.
		"""
		try: fn = self.functions[name]
		except KeyError: raise UnknownFunction(name) from None
		order = [p for p in fn.params if p in args] + [k for k in args if k not in fn.params]
		values = {k: self.evaluate(_as_expression(args[k])) for k in order}
		saved = {p: self.store[p] for p in fn.params if p in self.store}
		self.store.update(values)
		self._active_calls += 1
		try:
			with self.guard:
				return self._run_body(fn.body)
		finally:
			self._active_calls -= 1
			self.store.update(saved)
	
	def _run_body(self, body:Sequence[syntax.Action]) -> VALUE:
		if self.return_policy == UNWIND:
			try: self.run(body)
			except _Returning as r: return r.value
		else:
			for action in body:
				if action.op is Operation.Return:
					try: return self._return_value(action)
					except UCLError as ex: raise ex.blame(action)
				self.perform(action)
	
	def _return_value(self, action:syntax.Action) -> VALUE:
		if "value" not in action.params: return None
		return self.evaluate(expression_from_value(action.params["value"]))
	
	def _do_if(self, action:syntax.Action):
		branch = action.then if self.test(action.condition) else action.otherwise
		if branch is not None:
			with self.guard:
				self.run(branch)
	
	def _do_while(self, action:syntax.Action):
		iterations = 0
		while self.test(action.condition):
			if iterations >= MAX_ITERATIONS:
				raise LoopLimitExceeded(MAX_ITERATIONS)
			with self.guard:
				self.run(action.body)
			iterations += 1
		self.report.info("Loop completed %d iterations" % iterations)
	
	def _do_for(self, action:syntax.Action):
		start = self._bound(action.start)
		stop = self._bound(action.stop)
		for i in range(start, stop+1):
			self.store[action.loop_var] = float(i)
			with self.guard:
				self.run(action.body)
	
	def _bound(self, expr:syntax.Expression) -> int:
		value = self.evaluate(expr)
		it = as_integer(value)
		if it is None:
			raise NonIntegerBound("For-loop bounds must be integers, not %s" % render(value))
		return it
	
	def _do_define(self, action:syntax.Action):
		self.functions[action.target] = action.function
		self.report.info("Defined function %s(%s)" % (action.target, ', '.join(action.function.params)))
	
	def _do_leaf(self, action:syntax.Action):
		try:
			self.handler.handle(action, self.store)
		except UnsupportedOperation as ex:
			self.report.unsupported(ex.blame(action))

def _as_expression(it) -> syntax.Expression:
	return it if isinstance(it, syntax.Expression) else syntax.Literal(normalize(it))

def run_program(program:syntax.Program, handler, **options) -> Interpreter:
	machine = Interpreter(handler, **options)
	machine.execute(program)
	return machine
