"""
Translate a causal-action program into Ruby source text.

The translation is a straightforward tree-walk. Nesting of If, While, For,
and DefineFunction turns into Ruby blocks, indented two spaces per level,
so the shape of the output mirrors the shape of the program. Operations with
no sensible Ruby meaning turn into comments rather than errors, so that any
valid program yields some text.
"""
import re
from boozetools.support.foundation import Visitor
from . import syntax
from .syntax import Operation
from .document import expression_from_value
from .ontology import MalformedAction
from .values import plain, is_number

HEADER = ["# Generated from UCL", "# Universal Causal Language -> Ruby Compiler", ""]
INDENT = "  "

OPERATORS = ("+", "-", "*", "/", "%", "**")

WRITE_OPERATORS = {
	"add": "+",
	"subtract": "-",
	"multiply": "*",
}

# Float division, and a remainder taking the sign of the dividend.
ARITHMETIC_METHODS = {"/": "fdiv", "%": "remainder"}

# For a Call action, these parameter names are positional arguments, in this order.
POSITIONAL = ("a", "b", "c", "arg", "args", "n", "x", "y", "z")
NOT_ARGUMENTS = ("lhs", "rhs", "receiver", "out")

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")

def quote(text:str) -> str:
	escaped = text.replace("\\", "\\\\").replace('"', '\\"').replace("#{", "\\#{").replace("\n", "\\n")
	return '"' + escaped + '"'

def ruby_value(value) -> str:
	if value is None: return "nil"
	if isinstance(value, bool): return "true" if value else "false"
	if is_number(value):
		n = plain(value)
		if n != n: return "Float::NAN"
		if n in (float("inf"), float("-inf")): return ("-" if n < 0 else "") + "Float::INFINITY"
		return str(n) if isinstance(n, int) else repr(n)
	if isinstance(value, str): return quote(value)
	if isinstance(value, list): return "[%s]" % ", ".join(map(ruby_value, value))
	if isinstance(value, dict): return "{%s}" % ", ".join(_pair(k, v) for k, v in value.items())
	raise TypeError(value)

def _pair(key:str, value) -> str:
	if IDENTIFIER.match(key): return "%s: %s" % (key, ruby_value(value))
	return "%s => %s" % (quote(key), ruby_value(value))

class RubyGenerator(Visitor):
	"""
	Use one generator per program: it remembers the parameter lists of functions
	the program defines, so that calls pass their arguments in declared order.
	"""
	def __init__(self):
		self._lines = []
		self._depth = 0
		self._signatures = {}
	
	def generate(self, program:syntax.Program) -> str:
		self._lines = list(HEADER)
		self._depth = 0
		self._signatures = {
			action.target: action.function.params
			for action in syntax.walk(program.actions)
			if action.function is not None
		}
		for action in program.actions:
			self.visit(action)
		return "\n".join(self._lines) + "\n"
	
	def _emit(self, text:str):
		self._lines.append(INDENT*self._depth + text)
	
	def _block(self, actions):
		self._depth += 1
		for action in actions:
			self.visit(action)
		self._depth -= 1
	
	def visit_Action(self, action:syntax.Action):
		method = getattr(self, "action_"+action.op_name, None) if isinstance(action.op, Operation) else None
		try:
			if method is None:
				self._emit("# Unsupported operation: %s on %s" % (action.op_name, action.target))
			else:
				method(action)
		except MalformedAction as ex:
			raise ex.blame(action)
	
	# Expressions and conditions produce text.
	
	@staticmethod
	def visit_Literal(expr:syntax.Literal) -> str:
		return ruby_value(expr.value)
	
	@staticmethod
	def visit_Variable(expr:syntax.Variable) -> str:
		return expr.name
	
	def visit_BinaryOp(self, expr:syntax.BinaryOp) -> str:
		left, right = self.visit(expr.left), self.visit(expr.right)
		if expr.op in ARITHMETIC_METHODS:
			if isinstance(expr.left, syntax.Literal): left = "(%s)" % left
			return "%s.%s(%s)" % (left, ARITHMETIC_METHODS[expr.op], right)
		return "(%s %s %s)" % (left, expr.op, right)
	
	def visit_Call(self, expr:syntax.Call) -> str:
		order = self._argument_order(expr.name, expr.args)
		return "%s(%s)" % (expr.name, ", ".join(self.visit(expr.args[k]) for k in order))
	
	def _argument_order(self, name:str, args:dict) -> list[str]:
		declared = self._signatures.get(name)
		if declared is None: return list(args)
		return [p for p in declared if p in args] + [k for k in args if k not in declared]
	
	def visit_Comparison(self, cond:syntax.Comparison) -> str:
		return "%s %s %s" % (self.visit(cond.left), cond.op, self.visit(cond.right))
	
	def visit_And(self, cond:syntax.And) -> str:
		if not cond.operands: return "true"
		return "(%s)" % " && ".join(self.visit(c) for c in cond.operands)
	
	def visit_Or(self, cond:syntax.Or) -> str:
		if not cond.operands: return "false"
		return "(%s)" % " || ".join(self.visit(c) for c in cond.operands)
	
	def visit_Not(self, cond:syntax.Not) -> str:
		return "!(%s)" % self.visit(cond.operand)
	
	def _param_text(self, value) -> str:
		""" A parameter may hold an expression or a plain value. """
		return self.visit(expression_from_value(value))
	
	def _required(self, action:syntax.Action, key:str):
		if key not in action.params:
			raise MalformedAction("%s requires a '%s' parameter" % (action.op_name, key))
		return action.params[key]
	
	# Actions produce lines.
	
	def action_Call(self, action:syntax.Action):
		params, target = action.params, action.target
		if target in OPERATORS:
			if "lhs_register" in params and "rhs_register" in params:
				self._emit("(%s %s %s)" % (params["lhs_register"], target, params["rhs_register"]))
				return
			if "lhs" in params and "rhs" in params:
				self._emit("(%s %s %s)" % (ruby_value(params["lhs"]), target, ruby_value(params["rhs"])))
				return
		if target in self._signatures:
			order = self._argument_order(target, params)
			args = [self._param_text(params[k]) for k in order]
		else:
			args = [ruby_value(params[k]) for k in POSITIONAL if k in params]
			if not args:
				args = [_pair(k, v) for k, v in params.items() if k not in NOT_ARGUMENTS]
		self._emit("%s(%s)" % (target, ", ".join(args)))
	
	def action_Assign(self, action:syntax.Action):
		self._emit("%s = %s" % (action.target, self._param_text(self._required(action, "value"))))
	
	action_Bind = action_Assign
	
	def action_Write(self, action:syntax.Action):
		params = action.params
		if "operation" in params:
			operation = params["operation"] if isinstance(params["operation"], str) else ""
			lhs = self._operand(action, "lhs")
			rhs = self._operand(action, "rhs")
			if operation == "divide":
				if "lhs_register" not in params: lhs = "(%s)" % lhs
				self._emit("%s = %s.fdiv(%s)" % (action.target, lhs, rhs))
			else:
				self._emit("%s = %s %s %s" % (action.target, lhs, WRITE_OPERATORS.get(operation, "*"), rhs))
		elif "value" in params:
			self._emit("%s = %s" % (action.target, self._param_text(params["value"])))
		else:
			raise MalformedAction("Write requires a 'value' parameter or an operation")
	
	@staticmethod
	def _operand(action:syntax.Action, side:str) -> str:
		params = action.params
		if side+"_register" in params: return str(params[side+"_register"])
		if side in params: return ruby_value(params[side])
		raise MalformedAction("Write operation requires %s_register or %s" % (side, side))
	
	def action_Read(self, action:syntax.Action):
		self._emit(action.target)
	
	def action_Create(self, action:syntax.Action):
		if action.params:
			self._emit("%s.new(%s)" % (action.target, ", ".join(_pair(k, v) for k, v in action.params.items())))
		else:
			self._emit(action.target+".new")
	
	def action_Emit(self, action:syntax.Action):
		params = action.params
		if "content" in params:
			content = params["content"]
			if content == action.target: text = action.target
			else: text = self._param_text(content)
		elif "message" in params:
			text = ruby_value(params["message"])
		else:
			text = action.target
		self._emit("puts "+text)
	
	def action_Assert(self, action:syntax.Action):
		statement = action.params.get("statement", action.target)
		self._emit("# Assert: "+ruby_value(statement))
	
	def action_StoreFact(self, action:syntax.Action):
		if action.params:
			facts = ["%s.%s = %s" % (action.target, k, ruby_value(v)) for k, v in action.params.items()]
			self._emit("# Store fact: "+", ".join(facts))
		else:
			self._emit("# Store fact about "+action.target)
	
	def action_Return(self, action:syntax.Action):
		if "value" in action.params:
			self._emit("return "+self._param_text(action.params["value"]))
		else:
			self._emit("return "+action.target)
	
	def action_Decide(self, action:syntax.Action):
		choice = action.params.get("choice", action.params.get("decision", action.target))
		self._emit("# Decide: "+ruby_value(choice))
	
	def action_Wait(self, action:syntax.Action):
		duration = action.dur
		if duration is None and is_number(action.params.get("duration")):
			duration = action.params["duration"]
		self._emit("sleep "+ruby_value(1.0 if duration is None else duration))
	
	def action_GenRandomInt(self, action:syntax.Action):
		low, high = action.params.get("min", 0), action.params.get("max", 9)
		self._emit("%s = rand(%s..%s)" % (action.target, ruby_value(low), ruby_value(high)))
	
	def action_If(self, action:syntax.Action):
		self._emit("if "+self.visit(action.condition))
		self._block(action.then)
		if action.otherwise is not None:
			self._emit("else")
			self._block(action.otherwise)
		self._emit("end")
	
	def action_While(self, action:syntax.Action):
		self._emit("while "+self.visit(action.condition))
		self._block(action.body)
		self._emit("end")
	
	def action_For(self, action:syntax.Action):
		start, stop = self.visit(action.start), self.visit(action.stop)
		self._emit("(%s .. %s).each do |%s|" % (start, stop, action.loop_var))
		self._block(action.body)
		self._emit("end")
	
	def action_DefineFunction(self, action:syntax.Action):
		self._emit("def %s(%s)" % (action.target, ", ".join(action.function.params)))
		self._block(action.function.body)
		self._emit("end")

def to_ruby(program:syntax.Program) -> str:
	return RubyGenerator().generate(program)
