"""
A simulated kitchen robot as an execution substrate.

The robot tracks the objects it has gathered, what it holds, and what it
has done. It understands kitchen work and a little bookkeeping. Anything
else goes on its list of errors, and it carries on with the next step.
"""
from typing import Optional
from .. import syntax
from ..values import render
from .base import EffectHandler, text_param

BOILING = 100.0
ROOM_TEMPERATURE = 20.0

class ObjectState:
	def __init__(self):
		self.position = (0.0, 0.0, 0.0)
		self.container: Optional[str] = None
		self.temperature = ROOM_TEMPERATURE
		self.phase = "ready"
	
	def __repr__(self): return "<ObjectState %s %.0f°C>" % (self.phase, self.temperature)

class RobotState:
	def __init__(self):
		self.objects: dict[str, ObjectState] = {}
		self.arm_position = (0.0, 0.0, 0.0)
		self.gripper: Optional[str] = None
		self.temperatures: dict[str, float] = {}
		self.log = []
		self.errors = []
		self.variables = {}
	
	def display(self) -> str:
		lines = ["=== Robot State ===", ""]
		lines.append("Arm Position: (%.2f, %.2f, %.2f)" % self.arm_position)
		lines.append("Gripper: " + ("Holding "+self.gripper if self.gripper else "Empty"))
		lines.append("")
		if self.objects:
			lines.append("Objects:")
			for name, obj in self.objects.items():
				where = " in "+obj.container if obj.container else ""
				lines.append("  %s - pos:(%.1f, %.1f, %.1f), temp:%.0f°C, state:%s%s" % (
					name, *obj.position, obj.temperature, obj.phase, where
				))
			lines.append("")
		if self.temperatures:
			lines.append("Temperature Sensors:")
			lines.extend("  %s: %.1f°C" % kv for kv in self.temperatures.items())
			lines.append("")
		if self.log:
			lines.append("Execution Log:")
			lines.extend("  %d. %s" % (i, entry) for i, entry in enumerate(self.log, 1))
			lines.append("")
		if self.errors:
			lines.append("Errors:")
			lines.extend("  * "+error for error in self.errors)
		return "\n".join(lines)

class Robot(EffectHandler):
	def __init__(self):
		self.state = RobotState()
	
	def link(self, machine):
		super().link(machine)
		machine.store.update(self.state.variables)
		self.state.variables = machine.store
	
	def not_understood(self, action:syntax.Action, store:dict):
		error = "Unsupported operation: "+action.op_name
		self.state.errors.append(error)
		self.info("  "+error)
	
	def _log(self, message:str):
		self.state.log.append(message)
		self.info("  "+message)
	
	def perform_Gather(self, action:syntax.Action, store:dict):
		items = action.params.get("items")
		if isinstance(items, list):
			for item in items:
				if isinstance(item, str):
					self.state.objects[item] = ObjectState()
		self._log("Gathered items for "+action.target)
	
	def perform_Measure(self, action:syntax.Action, store:dict):
		self._log("Measured %s of %s" % (text_param(action, "amount", "unknown"), action.target))
	
	def perform_Heat(self, action:syntax.Action, store:dict):
		obj = self.state.objects.get(action.target)
		if obj is not None:
			obj.temperature = BOILING
			obj.phase = "boiling"
		self.state.temperatures[action.target] = BOILING
		self._log("Heating %s to %s" % (action.target, text_param(action, "temperature", "100°C")))
	
	def perform_Pour(self, action:syntax.Action, store:dict):
		source = text_param(action, "from", "?")
		into = text_param(action, "into", "?")
		amount = text_param(action, "amount", "?")
		self._log("Poured %s from %s into %s (%s)" % (action.target, source, into, amount))
	
	def perform_Mix(self, action:syntax.Action, store:dict):
		obj = self.state.objects.get(action.target)
		if obj is not None: obj.phase = "mixed"
		self._log("Mixed "+action.target)
	
	def perform_Stir(self, action:syntax.Action, store:dict):
		self._log("Stirred "+action.target)
	
	def perform_Place(self, action:syntax.Action, store:dict):
		into = text_param(action, "into", "?")
		obj = self.state.objects.get(action.target)
		if obj is not None: obj.container = into
		if self.state.gripper == action.target: self.state.gripper = None
		self._log("Placed %s into %s" % (action.target, into))
	
	def perform_Remove(self, action:syntax.Action, store:dict):
		source = text_param(action, "from", "?")
		obj = self.state.objects.get(action.target)
		if obj is not None: obj.container = None
		self.state.gripper = action.target
		self._log("Removed %s from %s" % (action.target, source))
	
	def perform_Steep(self, action:syntax.Action, store:dict):
		self._log("Steeping %s for %s" % (action.target, text_param(action, "duration", "?")))
	
	def perform_Serve(self, action:syntax.Action, store:dict):
		self._log("Serving "+action.target)
	
	def perform_Wait(self, action:syntax.Action, store:dict):
		duration = 1.0 if action.dur is None else action.dur
		self._log("Waiting %.0fs for %s" % (duration, action.target))
	
	def perform_Emit(self, action:syntax.Action, store:dict):
		content = action.params.get("content", action.target)
		message = content if isinstance(content, str) else render(self.evaluate_param(content))
		self._log("Output: "+message)
	
	def perform_Bind(self, action:syntax.Action, store:dict):
		if "value" in action.params:
			store[action.target] = value = self.evaluate_param(action.params["value"])
			self.info("  Stored: %s = %s" % (action.target, render(value)))
	
	perform_Assign = perform_Bind
	
	def perform_Return(self, action:syntax.Action, store:dict):
		pass
