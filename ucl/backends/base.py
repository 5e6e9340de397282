"""
The one capability the interpreter needs from a backend: somebody to
perform leaf actions. Subclasses supply a `perform_<Operation>` method
for each operation they understand. Anything else is not understood,
which is recoverable: the handler gets a chance to react (via `not_understood`)
and then the interpreter notes the fact and carries on.

The interpreter links itself to the handler before the first action,
which is how a handler evaluates expressions embedded in parameters.
"""
from typing import Any
from .. import syntax
from ..document import expression_from_value
from ..ontology import UnsupportedOperation
from ..values import VALUE

class EffectHandler:
	machine = None
	
	def link(self, machine):
		self.machine = machine
	
	def handle(self, action:syntax.Action, store:dict):
		op = action.op
		method = getattr(self, "perform_"+op.name, None) if isinstance(op, syntax.Operation) else None
		if method is None:
			self.not_understood(action, store)
			raise UnsupportedOperation(action.op_name)
		method(action, store)
	
	def not_understood(self, action:syntax.Action, store:dict):
		pass
	
	def evaluate_param(self, value:Any) -> VALUE:
		""" A parameter may be a plain value or an expression. Either way, get its value. """
		return self.machine.evaluate(expression_from_value(value))
	
	def info(self, *args):
		if self.machine is not None:
			self.machine.report.info(*args)

def text_param(action:syntax.Action, key:str, default:str) -> str:
	value = action.params.get(key)
	return value if isinstance(value, str) else default
