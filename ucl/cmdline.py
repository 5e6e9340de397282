"""
This is the command-line tool for the Universal Causal Language.

{0}

For example:

    ucl run examples/factorial.json --target brain

will run the factorial example on the simulated mind, and

    ucl compile examples/fibonacci.json

will print the same program as Ruby.

    ucl -h

will explain all the commands, and `ucl <command> -h` explains each one.
"""
import sys, argparse
from pathlib import Path

parser = argparse.ArgumentParser(
	prog="ucl",
	description="Tools for programs written in the Universal Causal Language.",
)
commands = parser.add_subparsers(dest="command", metavar="command")

def _command(name, help):
	sub = commands.add_parser(name, help=help, description=help)
	sub.add_argument("file", help="a UCL program as JSON. Try examples/hello_world.json for example.")
	return sub

def _interpreting(sub):
	sub.add_argument('-v', "--verbose", action="count", help="Narrate each step on standard-error.")
	sub.add_argument("--max-depth", type=int, default=None, help="Limit on nested descents. Default is 1000.")
	sub.add_argument("--legacy-return", action="store_true", help="Recognize Return only at the top level of a function body.")
	sub.add_argument("--forgiving", action="store_true", help="Skip top-level actions that fail to evaluate, rather than stopping.")
	return sub

_command("validate", "Check that a file is a well-formed program.")
_command("display", "Show a program in human-readable form.").add_argument('-c', "--compact", action="store_true", help="Print compact JSON instead.")
_command("convert", "Print a program in another format.").add_argument('-f', "--format", default="json", help="Output format. Only json for now.")
_command("analyze", "Summarize what a program does.")
_compile = _command("compile", "Translate a program into another language.")
_compile.add_argument('-t', "--target", default="ruby", help="Target language. Only ruby for now.")
_compile.add_argument('-o', "--output", help="Write to this file instead of standard output.")
_interpreting(_command("run", "Run a program on some substrate.")).add_argument('-t', "--target", default="ruby", choices=["ruby", "brain", "robot", "ai"], help="Where to run it.")
_interpreting(_command("brain", "Simulate the program on a human mind.")).add_argument('-p', "--production", action="store_true", help="Run on YOUR brain, interactively.")
_interpreting(_command("robot", "Simulate the program on a kitchen robot."))
_interpreting(_command("ai", "Simulate the program on a mock code-writing model."))
_interpreting(_command("parallel", "Run the program across Ruby, a mind, and a coordinator."))

def run(args):
	from .diagnostics import Report, TooManyIssues
	from .document import load_program
	from .ontology import UCLError, DocumentError
	report = Report(verbose=getattr(args, "verbose", 0))
	try:
		try: program = load_program(Path(args.file), report)
		except DocumentError:
			assert report.sick()
			report.complain_to_console()
			return 1
		return COMMANDS[args.command](program, args, report) or 0
	except TooManyIssues:
		report.complain_to_console()
		return 1
	except UCLError as ex:
		report.failed(ex)
		report.complain_to_console()
		return 1

def _options(args) -> dict:
	from .interpreter import TOP_LEVEL, UNWIND, MAX_DEPTH
	return {
		"max_depth": MAX_DEPTH if args.max_depth is None else args.max_depth,
		"return_policy": TOP_LEVEL if args.legacy_return else UNWIND,
		"forgiving": args.forgiving,
	}

def _simulate(handler, program, args, report):
	from .interpreter import run_program
	run_program(program, handler, report=report, **_options(args))
	print()
	print(handler.state.display())
	for note in report.notes:
		print("Note:", note, file=sys.stderr)

def do_validate(program, args, report):
	print("Valid UCL program (%d actions)" % len(program.actions))

def do_display(program, args, report):
	from .document import program_to_json
	from .analysis import describe
	print(program_to_json(program, compact=True) if args.compact else describe(program))

def do_convert(program, args, report):
	from .document import program_to_json
	if args.format != "json":
		print("Unsupported format: %s. Currently only 'json' is supported." % args.format, file=sys.stderr)
		return 1
	print(program_to_json(program))

def do_analyze(program, args, report):
	from .analysis import analyze, report_text
	print(report_text(analyze(program)))

def do_compile(program, args, report):
	from .codegen import to_ruby
	if args.target != "ruby":
		print("Unsupported target language: %s. Currently only 'ruby' is supported." % args.target, file=sys.stderr)
		return 1
	code = to_ruby(program)
	if args.output:
		Path(args.output).write_text(code, encoding="utf-8")
		print("Compiled to", args.output)
	else:
		print(code)

def do_run(program, args, report):
	if args.target == "ruby": return _run_ruby(program)
	if args.target == "brain": return do_brain(program, args, report)
	if args.target == "robot": return do_robot(program, args, report)
	return do_ai(program, args, report)

def _run_ruby(program):
	from .codegen import to_ruby
	from .coordinator import RubyRunner
	code = to_ruby(program)
	print("=== Compiled Ruby Code ===")
	print(code)
	print("=== Execution Output ===")
	done = RubyRunner(timeout=None).run(code)
	sys.stdout.write(done.stdout)
	sys.stderr.write(done.stderr)
	if done.returncode:
		print("Ruby execution failed with status %d" % done.returncode, file=sys.stderr)
		return 1

def do_brain(program, args, report):
	from .backends.cognitive import Brain
	if getattr(args, "production", False):
		from .transcription import transcribe
		transcribe(program)
		return
	brain = Brain()
	print("Simulating language execution on virtual human brain...")
	_simulate(brain, program, args, report)
	if brain.state.trace:
		print("Execution Trace:")
		for i, step in enumerate(brain.state.trace, 1):
			print("  %d. %s" % (i, step))

def do_robot(program, args, report):
	from .backends.physical import Robot
	print("Simulating physical execution on virtual robot...")
	_simulate(Robot(), program, args, report)

def do_ai(program, args, report):
	from .backends.knowledge import MockLanguageModel
	print("Simulating execution on a mock language model...")
	_simulate(MockLanguageModel(), program, args, report)

def do_parallel(program, args, report):
	from .coordinator import Coordinator
	print("Multi-Substrate Parallel Execution")
	print("="*60)
	coordinator = Coordinator(report=report, **_options(args))
	coordinator.execute(program)
	coordinator.show_results()

COMMANDS = {
	"validate": do_validate,
	"display": do_display,
	"convert": do_convert,
	"analyze": do_analyze,
	"compile": do_compile,
	"run": do_run,
	"brain": do_brain,
	"robot": do_robot,
	"ai": do_ai,
	"parallel": do_parallel,
}

def main():
	if len(sys.argv) > 1:
		exit(run(parser.parse_args()))
	else:
		print(__doc__.strip().format(parser.format_usage()))
