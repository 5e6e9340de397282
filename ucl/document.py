"""
Reading and writing programs as JSON documents.

A program document looks like {"metadata": {...}, "actions": [...]}.
Expressions are untagged: {"var": name}, {"expr": {"op", "left", "right"}},
and {"call": name, "args": {...}} are the special shapes; any other JSON value
is a literal. Conditions are tagged by their "type" field.

Decoding failures raise DocumentError with a breadcrumb path to the
offending part, like "actions[2].then[0].condition".
"""
import json
from pathlib import Path
from . import syntax
from .ontology import DocumentError, MalformedAction
from .values import normalize, plain, is_number

COMPARISON_NAMES = {
	"==": "==", "=": "==", "Equal": "==",
	"!=": "!=", "≠": "!=", "NotEqual": "!=",
	"<": "<", "LessThan": "<",
	"<=": "<=", "≤": "<=", "LessThanOrEqual": "<=",
	">": ">", "GreaterThan": ">",
	">=": ">=", "≥": ">=", "GreaterThanOrEqual": ">=",
}

def load_program(path:Path, report=None) -> syntax.Program:
	path = Path(path)
	try:
		text = path.read_text(encoding="utf-8")
	except OSError as ex:
		if report is not None: report.no_such_file(path)
		raise DocumentError("Cannot read %s: %s" % (path, ex.strerror)) from ex
	try:
		return program_from_json(text)
	except DocumentError as ex:
		if report is not None: report.broken_document(path, text, ex)
		raise

def program_from_json(text:str) -> syntax.Program:
	try: data = json.loads(text)
	except json.JSONDecodeError as ex:
		raise DocumentError(ex.msg, offset=ex.pos) from None
	return program_from_value(data)

def program_from_value(data) -> syntax.Program:
	if not isinstance(data, dict):
		raise DocumentError("A program must be a JSON object")
	if "actions" not in data:
		raise DocumentError("A program needs an \"actions\" list")
	metadata = data.get("metadata")
	if metadata is not None and not isinstance(metadata, dict):
		raise DocumentError("Metadata must be an object", "metadata")
	return syntax.Program(actions_from_value(data["actions"], "actions"), metadata)

def actions_from_value(data, where:str="actions") -> list[syntax.Action]:
	if not isinstance(data, list):
		raise DocumentError("Expected a list of actions", where)
	return [action_from_value(item, "%s[%d]" % (where, i)) for i, item in enumerate(data)]

def action_from_value(data, where:str="action") -> syntax.Action:
	if not isinstance(data, dict):
		raise DocumentError("An action must be a JSON object", where)
	actor = _required_text(data, "actor", where)
	op = _operation(data.get("op"), where)
	target = _required_text(data, "target", where)
	params = data.get("params")
	if params is not None:
		if not isinstance(params, dict):
			raise DocumentError("Params must be an object", where+".params")
		params = normalize(params)
		if op is syntax.Operation.DefineFunction and isinstance(params.get("body"), list):
			params["body"] = actions_from_value(data["params"]["body"], where+".params.body")
	
	def optional(key, decode):
		return decode(data[key], where+"."+key) if data.get(key) is not None else None
	
	try:
		return syntax.Action(
			actor, op, target,
			t=optional("t", _number), dur=optional("dur", _number),
			params=params,
			pre=optional("pre", _text), post=optional("post", _text),
			effects=optional("effects", _text_list),
			condition=optional("condition", condition_from_value),
			then=optional("then", actions_from_value),
			otherwise=optional("else", actions_from_value),
			body=optional("body", actions_from_value),
			loop_var=optional("loop_var", _text),
			start=optional("from", expression_from_value),
			stop=optional("to", expression_from_value),
		)
	except MalformedAction as ex:
		raise DocumentError(ex.detail(), where) from ex

def _operation(data, where):
	if isinstance(data, str):
		return syntax.operation(data)
	if isinstance(data, dict) and data.keys() == {"Custom"} and isinstance(data["Custom"], str):
		return syntax.Custom(data["Custom"])
	raise DocumentError("Operation must be a tag name or {\"Custom\": name}", where+".op")

def _required_text(data, key, where):
	if key not in data: raise DocumentError("Missing field %r" % key, where)
	return _text(data[key], where+"."+key)

def _text(data, where):
	if not isinstance(data, str): raise DocumentError("Expected a string", where)
	return data

def _number(data, where):
	if not is_number(data): raise DocumentError("Expected a number", where)
	return float(data)

def _text_list(data, where):
	if not (isinstance(data, list) and all(isinstance(x, str) for x in data)):
		raise DocumentError("Expected a list of strings", where)
	return data

def expression_from_value(data, where:str="expression") -> syntax.Expression:
	"""
	Any JSON value can be read as an expression.
	Objects of precisely the special shapes are variables, arithmetic, or calls.
	Everything else is a literal.
	"""
	if isinstance(data, syntax.Expression): return data
	if isinstance(data, dict):
		keys = data.keys()
		if keys == {"var"} and isinstance(data["var"], str):
			return syntax.Variable(data["var"])
		if keys == {"expr"} and isinstance(data["expr"], dict):
			inner = data["expr"]
			if inner.keys() != {"op", "left", "right"}:
				raise DocumentError("Arithmetic needs exactly op, left, and right", where+".expr")
			try:
				return syntax.BinaryOp(
					inner["op"],
					expression_from_value(inner["left"], where+".expr.left"),
					expression_from_value(inner["right"], where+".expr.right"),
				)
			except MalformedAction as ex:
				raise DocumentError(ex.detail(), where+".expr.op") from None
		if keys in ({"call"}, {"call", "args"}) and isinstance(data["call"], str):
			args = data.get("args", {})
			if not isinstance(args, dict):
				raise DocumentError("Call arguments must be an object", where+".args")
			return syntax.Call(data["call"], {
				name: expression_from_value(arg, where+".args."+name)
				for name, arg in args.items()
			})
	return syntax.Literal(normalize(data))

def condition_from_value(data, where:str="condition") -> syntax.Condition:
	if not isinstance(data, dict) or not isinstance(data.get("type"), str):
		raise DocumentError("A condition must be an object with a \"type\"", where)
	kind = data["type"].lower()
	if kind == "comparison":
		op = data.get("op")
		if op not in COMPARISON_NAMES:
			raise DocumentError("Unknown comparison %r" % (op,), where+".op")
		for key in ("left", "right"):
			if key not in data: raise DocumentError("Missing field %r" % key, where)
		return syntax.Comparison(
			COMPARISON_NAMES[op],
			expression_from_value(data["left"], where+".left"),
			expression_from_value(data["right"], where+".right"),
		)
	if kind in ("and", "or"):
		operands = data.get("operands")
		if not isinstance(operands, list):
			raise DocumentError("Expected a list of operands", where+".operands")
		parts = [condition_from_value(c, "%s.operands[%d]" % (where, i)) for i, c in enumerate(operands)]
		return syntax.And(parts) if kind == "and" else syntax.Or(parts)
	if kind == "not":
		if "operand" not in data: raise DocumentError("Missing field 'operand'", where)
		return syntax.Not(condition_from_value(data["operand"], where+".operand"))
	raise DocumentError("Unknown condition type %r" % data["type"], where+".type")


###############################################################################

def program_to_json(program:syntax.Program, compact:bool=False) -> str:
	return json.dumps(program_to_value(program), indent=None if compact else 2, ensure_ascii=False)

def program_to_value(program:syntax.Program) -> dict:
	it = {}
	if program.metadata is not None: it["metadata"] = plain(program.metadata)
	it["actions"] = [action_to_value(a) for a in program.actions]
	return it

def action_to_value(action:syntax.Action) -> dict:
	op = action.op
	it = {
		"actor": action.actor,
		"op": {"Custom": op.name} if isinstance(op, syntax.Custom) else op.name,
		"target": action.target,
	}
	if action.t is not None: it["t"] = plain(action.t)
	if action.dur is not None: it["dur"] = plain(action.dur)
	if action.params:
		params = {k: plain(v) for k, v in action.params.items() if action.function is None or k != "body"}
		if action.function is not None:
			params["body"] = [action_to_value(a) for a in action.function.body]
		it["params"] = params
	if action.pre is not None: it["pre"] = action.pre
	if action.post is not None: it["post"] = action.post
	if action.effects is not None: it["effects"] = list(action.effects)
	if action.condition is not None: it["condition"] = condition_to_value(action.condition)
	if action.then is not None: it["then"] = [action_to_value(a) for a in action.then]
	if action.otherwise is not None: it["else"] = [action_to_value(a) for a in action.otherwise]
	if action.body is not None: it["body"] = [action_to_value(a) for a in action.body]
	if action.loop_var is not None: it["loop_var"] = action.loop_var
	if action.start is not None: it["from"] = expression_to_value(action.start)
	if action.stop is not None: it["to"] = expression_to_value(action.stop)
	return it

def expression_to_value(expr:syntax.Expression):
	if isinstance(expr, syntax.Literal): return plain(expr.value)
	if isinstance(expr, syntax.Variable): return {"var": expr.name}
	if isinstance(expr, syntax.BinaryOp):
		return {"expr": {
			"op": expr.op,
			"left": expression_to_value(expr.left),
			"right": expression_to_value(expr.right),
		}}
	if isinstance(expr, syntax.Call):
		return {"call": expr.name, "args": {k: expression_to_value(v) for k, v in expr.args.items()}}
	raise TypeError(expr)

def condition_to_value(cond:syntax.Condition) -> dict:
	if isinstance(cond, syntax.Comparison):
		return {
			"type": "comparison", "op": cond.op,
			"left": expression_to_value(cond.left),
			"right": expression_to_value(cond.right),
		}
	if isinstance(cond, syntax.And):
		return {"type": "and", "operands": [condition_to_value(c) for c in cond.operands]}
	if isinstance(cond, syntax.Or):
		return {"type": "or", "operands": [condition_to_value(c) for c in cond.operands]}
	if isinstance(cond, syntax.Not):
		return {"type": "not", "operand": condition_to_value(cond.operand)}
	raise TypeError(cond)
