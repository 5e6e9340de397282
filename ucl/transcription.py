"""
Production mode: the program runs on the human at the keyboard.

Each step is shown as an instruction with a hint of what to do.
After each step, the human reports what they are thinking, feeling, and
remembering, and those reports make up the transcript at the end.
Input and output go through plain functions so a test can stand in for the human.
"""
import time
from . import syntax
from .syntax import Operation
from .values import render

RULE = "─"*60

def task_hints(action:syntax.Action) -> list[str]:
	op, target, params = action.op, action.target, action.params
	if op is Operation.StoreFact:
		return ["Store this information in your memory", "Commit '%s' to long-term storage" % target]
	if op is Operation.Assert:
		return ["Assert this as a strong belief", "Make this a core part of your worldview"]
	if op is Operation.Emit:
		return ["Generate and speak this output", "Say it out loud or in your mind"]
	if op is Operation.Receive:
		return ["Process this input through your senses", "Pay attention to: "+target]
	if op is Operation.Decide:
		return ["Make this decision", "Commit to: "+target]
	if op is Operation.Measure:
		return ["Observe and measure", "Focus your attention on: "+target]
	if op is Operation.Create:
		return ["Create this new concept in your mind", "Imagine: "+target]
	if op is Operation.Bind:
		return ["Bind this concept to a mental variable", "Associate '%s' with a value" % target]
	if op is Operation.Write:
		if "lhs_register" in params and "rhs_register" in params:
			symbol = {"add": "+", "subtract": "-", "divide": "÷"}.get(_text(params.get("operation")), "×")
			lhs, rhs = render(params["lhs_register"]), render(params["rhs_register"])
			return [
				"Recall %s and %s" % (lhs, rhs),
				"Calculate: %s %s %s" % (lhs, symbol, rhs),
				"Store the answer in: "+target,
			]
		return ["Update memory: "+target]
	if op is Operation.Oblige:
		return ["Accept this obligation", "Add to your active goals"]
	if op is Operation.Wait:
		duration = 1.0 if action.dur is None else action.dur
		return ["Wait and let %s seconds pass" % render(duration), "Be present in this moment"]
	if op is Operation.GenRandomInt:
		low, high = render(params.get("min", 0)), render(params.get("max", 9))
		return ["Think of a random number between %s and %s" % (low, high), "Remember it as '%s'" % target]
	return ["UNKNOWN OPERATION!", "Experience confusion", "Notice you don't understand"]

def transcribe(program:syntax.Program, ask=input, say=print) -> list[str]:
	"""
	Walk a human through the program. Returns the transcript, one entry per step,
	or an empty list if the human declines to begin.
	"""
	say("PRODUCTION MODE: Running on YOUR actual brain!")
	say("="*60)
	say("Instructions:")
	say("  - Read each operation carefully")
	say("  - Execute it using your brain")
	say("  - Report your internal state after each step")
	if ask("Ready to begin? (y/n): ").strip().lower() != "y":
		say("Aborted. Your brain remains in its current state.")
		return []
	transcript = []
	started = time.monotonic()
	count = len(program.actions)
	for step, action in enumerate(program.actions, 1):
		say(RULE)
		say("STEP %d/%d: %s Operation" % (step, count, action.op_name))
		say(RULE)
		say("Instruction:")
		say("   Actor:  "+action.actor)
		say("   Op:     "+action.op_name)
		say("   Target: "+action.target)
		if action.params:
			say("   Params:")
			for key, value in action.params.items():
				say("     * %s = %s" % (key, render(value) if action.function is None or key != "body" else "..."))
		if action.effects:
			say("   Effects: [%s]" % ", ".join(action.effects))
		say("Your Task:")
		for hint in task_hints(action):
			say("   → "+hint)
		ask("Press ENTER when you've executed this operation...")
		thought = ask("What are you thinking right now? ").strip()
		emotion = ask("How do you feel? (emotion): ").strip()
		memory = ask("What do you remember? ").strip()
		transcript.append("Step %d: %s(%s)\n  Thought: %s\n  Emotion: %s\n  Memory: %s" % (
			step, action.op_name, action.target, thought, emotion, memory
		))
		say("Step %d complete. Brain state updated." % step)
	elapsed = time.monotonic() - started
	say("PROGRAM EXECUTION COMPLETE")
	say("="*60)
	say("Total Operations: %d" % count)
	say("Execution Time: %.2fs" % elapsed)
	say("Production Brain State Capture:")
	say(RULE)
	for entry in transcript:
		say(entry)
		say()
	return transcript

def _text(value) -> str:
	return value if isinstance(value, str) else ""
