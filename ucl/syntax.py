"""
The abstract syntax of causal-action programs.

Every statement is an Action: an actor performs an operation on a target.
Four operations are compound (If, While, For, DefineFunction) and carry
nested action sequences; everything else is a leaf, and leaves are the
business of whichever effect handler is attached to the interpreter.

Nodes are built once, by the document reader or by hand, and never mutated.
"""
from enum import Enum
from typing import Optional, Any, Sequence, NamedTuple, Union
from .ontology import MalformedAction

class Operation(Enum):
	# Storage and data
	Create = "Create"
	Read = "Read"
	Write = "Write"
	Delete = "Delete"
	Bind = "Bind"
	Unbind = "Unbind"
	Assign = "Assign"
	# Communication
	Emit = "Emit"
	Receive = "Receive"
	# Cognition
	Measure = "Measure"
	Decide = "Decide"
	Wait = "Wait"
	Assert = "Assert"
	StoreFact = "StoreFact"
	# Obligations
	Oblige = "Oblige"
	Permit = "Permit"
	Remedy = "Remedy"
	# Language
	Transcribe = "Transcribe"
	Translate = "Translate"
	Express = "Express"
	# Computation
	Call = "Call"
	Return = "Return"
	GenRandomInt = "GenRandomInt"
	If = "If"
	While = "While"
	For = "For"
	DefineFunction = "DefineFunction"
	# The kitchen
	Gather = "Gather"
	Heat = "Heat"
	Pour = "Pour"
	Mix = "Mix"
	Stir = "Stir"
	Place = "Place"
	Remove = "Remove"
	Steep = "Steep"
	Serve = "Serve"
	# Code generation
	Generate = "Generate"
	Parse = "Parse"
	Execute = "Execute"
	# Nobody understands these. That's the point.
	Flurble = "Flurble"
	Grok = "Grok"
	Defenestrate = "Defenestrate"

class Custom(NamedTuple):
	""" Any operation tag not in the standard set. """
	name: str
	def __str__(self): return self.name

OP = Union[Operation, Custom]

COMPOUND = frozenset([Operation.If, Operation.While, Operation.For, Operation.DefineFunction])

def operation(text:str) -> OP:
	try: return Operation[text]
	except KeyError: return Custom(text)


class Expression:
	pass

class Literal(Expression):
	def __init__(self, value):
		self.value = value
	def __repr__(self): return "<Literal %r>" % (self.value,)

class Variable(Expression):
	def __init__(self, name:str):
		self.name = name
	def __repr__(self): return "<Variable %s>" % self.name

ARITHMETIC = ("+", "-", "*", "/", "%")

class BinaryOp(Expression):
	def __init__(self, op:str, left:Expression, right:Expression):
		if op not in ARITHMETIC:
			raise MalformedAction("Unknown arithmetic operator %r" % op)
		self.op, self.left, self.right = op, left, right
	def __repr__(self): return "<BinaryOp %r %s %r>" % (self.left, self.op, self.right)

class Call(Expression):
	""" A call to a user-defined function. Arguments are named, and kept in written order. """
	def __init__(self, name:str, args:dict[str, Expression]):
		self.name, self.args = name, dict(args)
	def __repr__(self): return "<Call %s(%s)>" % (self.name, ', '.join(self.args))


class Condition:
	pass

COMPARISON = ("==", "!=", "<", "<=", ">", ">=")

class Comparison(Condition):
	def __init__(self, op:str, left:Expression, right:Expression):
		if op not in COMPARISON:
			raise MalformedAction("Unknown comparison %r" % op)
		self.op, self.left, self.right = op, left, right

class And(Condition):
	def __init__(self, operands:Sequence[Condition]):
		self.operands = tuple(operands)

class Or(Condition):
	def __init__(self, operands:Sequence[Condition]):
		self.operands = tuple(operands)

class Not(Condition):
	def __init__(self, operand:Condition):
		self.operand = operand


class FunctionDef(NamedTuple):
	params: tuple[str, ...]
	body: tuple["Action", ...]


class Action:
	"""
	One statement of a program.
	
	The control-flow fields (condition, then, otherwise, body, loop_var, start, stop)
	matter only to the compound operations; the constructor insists they be present
	where needed. For DefineFunction, the parameter list and body come in through
	`params` as "args" (a list of names) and "body" (a list of Action objects).
	"""
	function: Optional[FunctionDef]
	
	def __init__(
		self, actor:str, op:OP, target:str, *,
		t:Optional[float]=None, dur:Optional[float]=None, params:Optional[dict[str, Any]]=None,
		pre:Optional[str]=None, post:Optional[str]=None, effects:Optional[Sequence[str]]=None,
		condition:Optional[Condition]=None,
		then:Optional[Sequence["Action"]]=None, otherwise:Optional[Sequence["Action"]]=None,
		body:Optional[Sequence["Action"]]=None,
		loop_var:Optional[str]=None, start:Optional[Expression]=None, stop:Optional[Expression]=None,
	):
		if isinstance(op, str): op = operation(op)
		self.actor, self.op, self.target = actor, op, target
		self.t, self.dur = t, dur
		self.params = params if params is not None else {}
		self.pre, self.post = pre, post
		self.effects = tuple(effects) if effects is not None else None
		self.condition = condition
		self.then = _seq(then)
		self.otherwise = _seq(otherwise)
		self.body = _seq(body)
		self.loop_var, self.start, self.stop = loop_var, start, stop
		self.function = None
		self._check()
	
	def _check(self):
		op = self.op
		if op is Operation.If:
			if self.condition is None: raise MalformedAction("If requires a condition").blame(self)
			if self.then is None: raise MalformedAction("If requires a then-branch").blame(self)
		elif op is Operation.While:
			if self.condition is None: raise MalformedAction("While requires a condition").blame(self)
			if self.body is None: raise MalformedAction("While requires a body").blame(self)
		elif op is Operation.For:
			if not self.loop_var: raise MalformedAction("For requires a loop variable").blame(self)
			if self.start is None: raise MalformedAction("For requires a from-expression").blame(self)
			if self.stop is None: raise MalformedAction("For requires a to-expression").blame(self)
			if self.body is None: raise MalformedAction("For requires a body").blame(self)
		elif op is Operation.DefineFunction:
			args, body = self.params.get("args"), self.params.get("body")
			if not (isinstance(args, list) and all(isinstance(a, str) for a in args)):
				raise MalformedAction("DefineFunction requires params.args as a list of names").blame(self)
			if not (isinstance(body, (list, tuple)) and all(isinstance(a, Action) for a in body)):
				raise MalformedAction("DefineFunction requires params.body as a list of actions").blame(self)
			self.function = FunctionDef(tuple(args), tuple(body))
	
	@property
	def op_name(self) -> str: return self.op.name
	
	def is_compound(self) -> bool: return self.op in COMPOUND
	
	def children(self) -> tuple["Action", ...]:
		""" Every directly-nested action, in textual order. """
		if self.function is not None: return self.function.body
		return (self.then or ()) + (self.otherwise or ()) + (self.body or ())
	
	def __repr__(self): return "<Action %s %s %r>" % (self.actor, self.op_name, self.target)

def _seq(actions):
	return None if actions is None else tuple(actions)


class Program:
	def __init__(self, actions:Sequence[Action], metadata:Optional[dict]=None):
		self.actions = tuple(actions)
		self.metadata = metadata
	def __len__(self): return len(self.actions)
	def __iter__(self): return iter(self.actions)

def walk(actions:Sequence[Action]):
	""" Pre-order over every action, nested ones included. """
	for a in actions:
		yield a
		yield from walk(a.children())
