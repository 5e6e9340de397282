"""
A simulated human mind as an execution substrate.

Beliefs are the interpreter's variable store. Around that, the mind keeps
emotions, a small working memory, a focus of attention, things it has said,
things it has thought, and goals. When it meets an operation it does not
understand, it gets confused and curious, and says so.
"""
import random
from typing import Optional
from .. import syntax
from ..ontology import DivideByZero, MalformedAction
from ..values import as_number, as_integer, render
from .base import EffectHandler, text_param

WORKING_MEMORY_SPAN = 7

# operation -> (symbol, function)
ARITHMETIC = {
	"add": ("+", lambda a, b: a + b),
	"subtract": ("-", lambda a, b: a - b),
	"multiply": ("×", lambda a, b: a * b),
	"divide": ("÷", lambda a, b: a / b),
}

class BrainState:
	def __init__(self):
		self.beliefs = {}
		self.emotions = {}
		self.working_memory = []
		self.attention: Optional[str] = None
		self.output = []
		self.thoughts = []
		self.goals = []
		self.trace = []
	
	def feel(self, emotion:str, amount:float):
		self.emotions[emotion] = self.emotions.get(emotion, 0.0) + amount
	
	def remember(self, item:str):
		self.working_memory.append(item)
		if len(self.working_memory) > WORKING_MEMORY_SPAN:
			del self.working_memory[0]
	
	def display(self) -> str:
		lines = ["=== Brain State ===", ""]
		def section(title, items):
			if items:
				lines.append(title)
				lines.extend(items)
				lines.append("")
		section("Beliefs:", ["  %s = %s" % (k, render(v)) for k, v in self.beliefs.items()])
		section("Emotional State:", ["  %s: %.2f" % kv for kv in self.emotions.items()])
		section("Working Memory:", ["  - "+item for item in self.working_memory])
		if self.attention is not None:
			lines.extend(["Current Focus: "+self.attention, ""])
		section("Active Goals:", ["  → "+goal for goal in self.goals])
		section("Internal Thoughts:", ["  * "+thought for thought in self.thoughts])
		section("Output/Speech:", ["  > "+text for text in self.output])
		return "\n".join(lines)

class Brain(EffectHandler):
	def __init__(self, rng:random.Random=None):
		self.state = BrainState()
		self.rng = rng or random.Random()
	
	def link(self, machine):
		super().link(machine)
		machine.store.update(self.state.beliefs)
		self.state.beliefs = machine.store
	
	def handle(self, action:syntax.Action, store:dict):
		self.state.trace.append("%s(%s)" % (action.op_name, action.target))
		super().handle(action, store)
	
	def not_understood(self, action:syntax.Action, store:dict):
		confusion = "Sorry, I don't know what that means: %s" % action.op_name
		self.state.thoughts.append(confusion)
		self.state.output.append("I'm not sure what you mean...")
		self.state.feel("confusion", 0.4)
		self.state.feel("curiosity", 0.3)
		self.info("  "+confusion)
	
	def perform_StoreFact(self, action:syntax.Action, store:dict):
		entity = text_param(action, "entity", action.target)
		properties = {k: v for k, v in action.params.items() if k != "entity"}
		for key, value in properties.items():
			store["%s.%s" % (entity, key)] = value
			self.info("  Stored: %s.%s = %s" % (entity, key, render(value)))
		if properties:
			self.state.remember("The %s has properties: %s" % (entity, ", ".join(properties)))
	
	def perform_Assert(self, action:syntax.Action, store:dict):
		statement = text_param(action, "statement", action.target)
		store["assertion."+action.target] = statement
		self.state.thoughts.append("I believe that: "+statement)
		self.info("  Asserted: "+statement)
	
	def perform_Emit(self, action:syntax.Action, store:dict):
		params = action.params
		if "content" in params:
			content = params["content"]
			if isinstance(content, str):
				message = render(store[content]) if content in store else content
			else:
				message = render(self.evaluate_param(content))
		elif "message" in params:
			message = render(params["message"])
		elif action.target in store and not params:
			message = render(store[action.target])
		else:
			message = action.target
		self.state.output.append(message)
		if params.get("intent") == "greeting":
			self.state.feel("warmth", 0.3)
		self.info('  Output: "%s"' % message)
	
	def perform_Receive(self, action:syntax.Action, store:dict):
		heard = text_param(action, "content", action.target)
		self.state.remember("Heard: "+heard)
		self.state.attention = heard
		self.info('  Received: "%s"' % heard)
	
	def perform_Measure(self, action:syntax.Action, store:dict):
		self.state.attention = action.target
		for key, value in action.params.items():
			store["observed.%s.%s" % (action.target, key)] = value
		self.info("  Observing: "+action.target)
	
	def perform_Decide(self, action:syntax.Action, store:dict):
		decision = text_param(action, "choice", text_param(action, "decision", action.target))
		self.state.thoughts.append("Decided to: "+decision)
		goal = action.params.get("goal")
		if isinstance(goal, str):
			self.state.goals.append(goal)
		self.info("  Decision: "+decision)
	
	def perform_Read(self, action:syntax.Action, store:dict):
		if action.target in store:
			recalled = "Recalled: %s = %s" % (action.target, render(store[action.target]))
			self.state.remember(recalled)
			self.info("  "+recalled)
		else:
			self.info("  No memory of: "+action.target)
	
	def perform_Write(self, action:syntax.Action, store:dict):
		params = action.params
		if "operation" in params:
			operation = params["operation"] if isinstance(params["operation"], str) else ""
			symbol, fn = ARITHMETIC.get(operation, ARITHMETIC["multiply"])
			lhs = self._operand(store, "lhs", params)
			rhs = self._operand(store, "rhs", params)
			if operation == "divide" and rhs == 0:
				raise DivideByZero()
			result = fn(lhs, rhs)
			store[action.target] = result
			self.state.thoughts.append("Calculated: %s = %s %s %s = %s" % (
				action.target, render(lhs), symbol, render(rhs), render(result)
			))
			self.info("  Calculated: %s = %s" % (action.target, render(result)))
		elif "value" in params:
			store[action.target] = value = self.evaluate_param(params["value"])
			self.info("  Stored: %s = %s" % (action.target, render(value)))
	
	@staticmethod
	def _operand(store:dict, side:str, params:dict) -> float:
		""" A register names a variable; otherwise the parameter is the number itself. Missing means zero. """
		if side+"_register" in params:
			value = store.get(params[side+"_register"]) if isinstance(params[side+"_register"], str) else None
		else:
			value = params.get(side)
		number = as_number(value)
		return 0.0 if number is None else number
	
	def perform_Create(self, action:syntax.Action, store:dict):
		self.state.thoughts.append("Conceived of: "+action.target)
		store["concept."+action.target] = {"exists": True}
		self.info("  Created concept: "+action.target)
	
	def perform_Bind(self, action:syntax.Action, store:dict):
		if "value" in action.params:
			store[action.target] = value = self.evaluate_param(action.params["value"])
			self.info("  Bound: %s = %s" % (action.target, render(value)))
	
	perform_Assign = perform_Bind
	
	def perform_Oblige(self, action:syntax.Action, store:dict):
		duty = action.params.get("duty")
		if isinstance(duty, str):
			self.state.goals.append("Must: "+duty)
			self.state.feel("responsibility", 0.5)
			self.info("  Obligation: "+duty)
	
	def perform_Wait(self, action:syntax.Action, store:dict):
		duration = 1.0 if action.dur is None else action.dur
		self.state.thoughts.append("Waiting for %.1fs" % duration)
		self.info("  Waiting: %.1fs" % duration)
	
	def perform_GenRandomInt(self, action:syntax.Action, store:dict):
		low, high = _integer_param(action, "min", 0), _integer_param(action, "max", 9)
		if low > high:
			raise MalformedAction("GenRandomInt needs min <= max, not %d > %d" % (low, high))
		number = self.rng.randint(low, high)
		store[action.target] = float(number)
		self.state.thoughts.append("Generated random number: %s = %d" % (action.target, number))
		self.info("  Generated: %s = %d" % (action.target, number))
	
	def _imagine(self, action:syntax.Action, verb:str):
		""" The mind cannot touch anything, but it can picture doing so. """
		parts = [verb+" "+action.target]
		for key, pattern in (("from", "from %s"), ("into", "into %s"), ("amount", "(%s)")):
			if key in action.params:
				value = action.params[key]
				parts.append(pattern % (value if isinstance(value, str) else "?"))
		description = " ".join(parts)
		self.state.thoughts.append("Performing action: "+description)
		self.state.remember(description)
		self.state.feel("focus", 0.2)
		self.info("  "+description)
	
	def perform_Gather(self, action, store): self._imagine(action, "Gathering")
	def perform_Heat(self, action, store): self._imagine(action, "Heating")
	def perform_Pour(self, action, store): self._imagine(action, "Pouring")
	def perform_Mix(self, action, store): self._imagine(action, "Mixing")
	def perform_Stir(self, action, store): self._imagine(action, "Stirring")
	def perform_Place(self, action, store): self._imagine(action, "Placing")
	def perform_Remove(self, action, store): self._imagine(action, "Removing")
	def perform_Steep(self, action, store): self._imagine(action, "Steeping")
	def perform_Serve(self, action, store): self._imagine(action, "Serving")

def _integer_param(action:syntax.Action, key:str, default:int) -> int:
	value = as_integer(action.params.get(key))
	return default if value is None else value
