"""
A stand-in for a code-writing language model.

It is perfectly deterministic: instructions are matched against a small
knowledge base of canned programs by keyword, and the matching program is
filed away under the action's target. The canned programs live as JSON
files in the `knowledge` folder of this package; the file name (with
underscores for spaces) is the keyword.
"""
import json
from pathlib import Path
from .. import syntax
from ..document import actions_from_value
from ..ontology import NoKnowledge, MalformedAction
from ..values import render
from .base import EffectHandler, text_param

KNOWLEDGE_FOLDER = Path(__file__).parent.parent / "knowledge"

def load_knowledge(folder:Path=KNOWLEDGE_FOLDER) -> dict[str, list[syntax.Action]]:
	knowledge = {}
	for path in sorted(folder.glob("*.json")):
		keyword = path.stem.replace("_", " ").lower()
		with open(path, "r", encoding="utf-8") as fh:
			knowledge[keyword] = actions_from_value(json.load(fh), path.name)
	return knowledge

class ModelState:
	def __init__(self, knowledge:dict[str, list[syntax.Action]]):
		self.knowledge_base = knowledge
		self.prompts = []
		self.responses = []
		self.generated_code: dict[str, list[syntax.Action]] = {}
		self.executions = []
		self.model_name = "MockLLM-UCL-v1"
		self.temperature = 0.0
	
	def display(self) -> str:
		lines = ["=== Mock AI State ===", ""]
		lines.append("Model: %s (temperature: %s)" % (self.model_name, render(self.temperature)))
		lines.append("")
		if self.prompts:
			lines.append("Prompt History:")
			lines.extend("  %d. %s" % (i, p) for i, p in enumerate(self.prompts, 1))
			lines.append("")
		if self.generated_code:
			lines.append("Generated Code:")
			lines.extend("  %s - %d actions" % (k, len(v)) for k, v in self.generated_code.items())
			lines.append("")
		lines.append("Knowledge Base: %d preloaded tasks" % len(self.knowledge_base))
		lines.extend("  * "+k for k in self.knowledge_base)
		return "\n".join(lines)

class MockLanguageModel(EffectHandler):
	def __init__(self, knowledge:dict=None):
		self.state = ModelState(load_knowledge() if knowledge is None else knowledge)
	
	def perform_Generate(self, action:syntax.Action, store:dict):
		instruction = action.params.get("instruction")
		if not isinstance(instruction, str):
			raise MalformedAction("Generate requires an 'instruction' parameter")
		self.state.prompts.append(instruction)
		self.info('  Received instruction: "%s"' % instruction)
		wanted = instruction.lower()
		for keyword, actions in self.state.knowledge_base.items():
			if keyword in wanted:
				self.state.generated_code[action.target] = list(actions)
				self.state.responses.append("Generated %s for: %s" % (keyword, instruction))
				self.info("  Generated %d UCL actions from \"%s\"" % (len(actions), keyword))
				return
		self.state.responses.append("I don't know how to: "+instruction)
		raise NoKnowledge("No knowledge base entry for: "+instruction)
	
	def perform_Parse(self, action:syntax.Action, store:dict):
		self.info("  Parsing code from "+action.target)
	
	def perform_Execute(self, action:syntax.Action, store:dict):
		name = text_param(action, "code", action.target)
		if name not in self.state.generated_code:
			raise NoKnowledge("No generated code found: "+name)
		self.state.executions.append(name)
		self.info("  Executing generated code: %s (%d actions)" % (name, len(self.state.generated_code[name])))
	
	def perform_Emit(self, action:syntax.Action, store:dict):
		self.info("  "+text_param(action, "content", action.target))
