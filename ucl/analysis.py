"""
Static facts about a program, for the `analyze` and `display` commands.

The interesting part is finding recursive functions. Each defined function
gets an edge to every function its body mentions in a call, whether in an
expression or as the target of a Call action. Functions in a strongly-connected
component of that graph (or with an edge to themselves) are recursive.
"""
from collections import Counter
from typing import NamedTuple, Optional
from boozetools.support.foundation import Visitor, strongly_connected_components_hashable
from . import syntax
from .document import expression_from_value
from .values import render

class Analysis(NamedTuple):
	total: int
	nested_total: int
	operations: list[tuple[str, int]]
	actors: list[tuple[str, int]]
	domains: list[tuple[str, int]]
	timed: int
	time_range: Optional[tuple[float, float]]
	max_nesting: int
	functions: list[str]
	recursive: list[str]

def analyze(program:syntax.Program) -> Analysis:
	actions = program.actions
	times = [a.t for a in actions if a.t is not None]
	functions = {}
	for action in syntax.walk(actions):
		if action.function is not None:
			functions[action.target] = action.function
	return Analysis(
		total=len(actions),
		nested_total=sum(1 for _ in syntax.walk(actions)),
		operations=Counter(a.op_name for a in actions).most_common(),
		actors=Counter(a.actor for a in actions).most_common(10),
		domains=Counter(e for a in actions for e in a.effects or ()).most_common(),
		timed=len(times),
		time_range=(min(times), max(times)) if times else None,
		max_nesting=nesting(actions),
		functions=list(functions),
		recursive=recursive_functions(functions),
	)

def nesting(actions) -> int:
	""" How deep do compound actions go? A flat program has depth zero. """
	deepest = 0
	for action in actions:
		inner = action.children()
		if inner or action.is_compound():
			deepest = max(deepest, 1 + nesting(inner))
	return deepest

def recursive_functions(functions:dict[str, syntax.FunctionDef]) -> list[str]:
	graph = {}
	for name, fn in functions.items():
		finder = CallFinder()
		for action in fn.body:
			finder.visit(action)
		graph[name] = finder.found & functions.keys()
	recursive = []
	for scc in strongly_connected_components_hashable(graph):
		if len(scc) > 1 or scc[0] in graph[scc[0]]:
			recursive.extend(scc)
	return sorted(recursive)

class CallFinder(Visitor):
	""" Collects the names of every function called within some actions. """
	def __init__(self):
		self.found = set()
	
	def visit_Action(self, action:syntax.Action):
		if action.op is syntax.Operation.Call:
			self.found.add(action.target)
		if action.condition is not None: self.visit(action.condition)
		for expr in (action.start, action.stop):
			if expr is not None: self.visit(expr)
		for key, value in action.params.items():
			if action.function is not None and key == "body": continue
			self.visit(expression_from_value(value))
		for child in action.children():
			self.visit(child)
	
	def visit_Literal(self, expr): pass
	def visit_Variable(self, expr): pass
	
	def visit_BinaryOp(self, expr:syntax.BinaryOp):
		self.visit(expr.left)
		self.visit(expr.right)
	
	def visit_Call(self, expr:syntax.Call):
		self.found.add(expr.name)
		for arg in expr.args.values():
			self.visit(arg)
	
	def visit_Comparison(self, cond:syntax.Comparison):
		self.visit(cond.left)
		self.visit(cond.right)
	
	def visit_And(self, cond:syntax.And):
		for c in cond.operands: self.visit(c)
	
	visit_Or = visit_And
	
	def visit_Not(self, cond:syntax.Not):
		self.visit(cond.operand)

def report_text(analysis:Analysis) -> str:
	lines = ["=== UCL Program Analysis ===", ""]
	lines.append("Total actions: %d" % analysis.total)
	if analysis.nested_total != analysis.total:
		lines.append("Including nested actions: %d" % analysis.nested_total)
	lines.extend(["", "Operation distribution:"])
	lines.extend("  %s: %d" % pair for pair in analysis.operations)
	lines.extend(["", "Top actors:"])
	lines.extend("  %s: %d" % pair for pair in analysis.actors)
	if analysis.domains:
		lines.extend(["", "Domain tags:"])
		lines.extend("  %s: %d" % pair for pair in analysis.domains)
	if analysis.timed:
		lines.extend(["", "Temporal analysis:"])
		lines.append("  Actions with timestamps: %d" % analysis.timed)
		lines.append("  Time range: %s to %s" % tuple(map(render, analysis.time_range)))
	if analysis.max_nesting:
		lines.extend(["", "Control flow:", "  Maximum nesting depth: %d" % analysis.max_nesting])
	if analysis.functions:
		lines.extend(["", "Functions:"])
		for name in analysis.functions:
			lines.append("  %s%s" % (name, " (recursive)" if name in analysis.recursive else ""))
	return "\n".join(lines)

def describe(program:syntax.Program) -> str:
	""" The human-readable listing of a program. """
	lines = []
	if program.metadata:
		lines.append("=== Metadata ===")
		lines.extend("  %s: %s" % (k, render(v)) for k, v in program.metadata.items())
		lines.append("")
	lines.append("=== Actions (%d) ===" % len(program.actions))
	for i, action in enumerate(program.actions):
		lines.append("")
		lines.append("[%d] %s" % (i, action.op_name))
		_describe_action(action, lines, "  ")
	return "\n".join(lines)

def _describe_action(action:syntax.Action, lines:list, indent:str):
	lines.append(indent+"Actor:  "+action.actor)
	lines.append(indent+"Target: "+action.target)
	if action.t is not None: lines.append(indent+"Time:   "+render(action.t))
	if action.dur is not None: lines.append(indent+"Duration: "+render(action.dur))
	params = {k: v for k, v in action.params.items() if action.function is None or k != "body"}
	if params:
		lines.append(indent+"Parameters:")
		lines.extend("%s  %s: %s" % (indent, k, render(v)) for k, v in params.items())
	if action.effects is not None:
		lines.append(indent+"Effects: [%s]" % ", ".join(action.effects))
	for title, nested in (("Then", action.then), ("Else", action.otherwise), ("Body", action.body)):
		if nested is not None:
			_describe_block(title, nested, lines, indent)
	if action.function is not None:
		_describe_block("Body", action.function.body, lines, indent)

def _describe_block(title, actions, lines, indent):
	lines.append(indent+title+":")
	for action in actions:
		lines.append(indent+"  - "+action.op_name)
		_describe_action(action, lines, indent+"    ")
