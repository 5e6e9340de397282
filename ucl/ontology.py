"""
The error taxonomy shared by every part of the interpreter.

These live apart from the rest to avoid circular imports:
the syntax module needs MalformedAction, and everything
needs the syntax module.

A fatal error carries the action that was executing when it happened,
so that a human can find the culprit. The innermost action wins:
once an error knows its action, enclosing actions leave it alone.
"""

class UCLError(Exception):
	""" Anything that can go wrong interpreting a causal-action program. """
	action = None
	
	def blame(self, action):
		if self.action is None:
			self.action = action
		return self
	
	def detail(self) -> str:
		return str(self.args[0]) if self.args else type(self).__name__
	
	def __str__(self):
		if self.action is None:
			return self.detail()
		return "%s (while performing %s on %r)" % (self.detail(), self.action.op_name, self.action.target)

class DocumentError(UCLError):
	"""
	The input document could not be read as a program.
	Carries the path within the document (like "actions[2].then[0]")
	and, when the text failed to parse at all, a character offset.
	"""
	def __init__(self, message:str, where:str="", offset:int=None):
		super().__init__(message)
		self.where = where
		self.offset = offset
	
	def detail(self) -> str:
		if self.where:
			return "%s at %s" % (self.args[0], self.where)
		return self.args[0]

class MalformedAction(UCLError):
	""" A compound action lacks a required field, or a parameter has the wrong shape. """

class UnboundVariable(UCLError):
	def __init__(self, name:str):
		super().__init__(name)
		self.name = name
	def detail(self): return "Unbound variable: %s" % self.name

class TypeMismatch(UCLError):
	""" Arithmetic applied to something other than numbers. """

class DivideByZero(UCLError):
	def detail(self): return "Division by zero"

class UnknownFunction(UCLError):
	def __init__(self, name:str):
		super().__init__(name)
		self.name = name
	def detail(self): return "Unknown function: %s" % self.name

class NonIntegerBound(UCLError):
	""" A For-loop bound that is not a number with integral value. """

class LoopLimitExceeded(UCLError):
	def detail(self): return "While-loop exceeded %d iterations" % self.args[0]

class RecursionLimitExceeded(UCLError):
	def detail(self): return "Maximum recursion depth (%d) exceeded" % self.args[0]

class UnsupportedOperation(UCLError):
	""" Raised by an effect handler for an operation it has no meaning for. Non-fatal to a run. """
	def detail(self): return "Unsupported operation: %s" % self.args[0]

class NoKnowledge(UCLError):
	""" The knowledge base has nothing to offer for a request. """

class SubstrateUnavailable(UCLError):
	""" An external execution substrate (like the Ruby interpreter) cannot be reached. """

# Errors a forgiving interpreter may skip past:
EVALUATION_ERRORS = (UnboundVariable, TypeMismatch, DivideByZero, UnknownFunction, NonIntegerBound)
