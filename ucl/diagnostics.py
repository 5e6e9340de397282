import sys, random
from functools import lru_cache
from pathlib import Path
from boozetools.support.failureprone import SourceText, illustration

from .ontology import UCLError, DocumentError

class TooManyIssues(Exception):
	pass

def _outburst():
	particle = ["Oh, ", "Well, ", "Aw, ", "", ""]
	
	minced_oaths = [
		'Ack', 'ARGH', 'Blargh', 'Blasted Thing',
		'Confound it', 'Crud', 'Curses', "Crikey",
		'Dag Nabbit', 'Drat', 'Fiddlesticks', 'Flaming Flamingos',
		'Gack', 'Good Grief', 'Great Googly Moogly', "Great Scott",
		'SNAP', "Sweet Cheese and Crackers", 'Jeepers', 'Heavens',
		"Mercy", 'Nuts', 'Rats', 'Woe is me',
	]
	
	resignations = [
		'I am undone.',
		'I cannot continue.',
		'The causal chain is broken.',
		'I have no idea what the right answer is.',
		'I need to ask for help.',
		'Somebody check the wiring.',
	]
	
	return "%s%s! %s"%tuple(map(random.choice, (particle, minced_oaths, resignations)))

class Report:
	"""
	Collects the things that went wrong, and (when verbose) narrates the things that went right.
	Issues are fatal problems worth a stern message. Notes are the little things,
	like an effect handler shrugging at an operation it does not understand.
	"""
	_issues : list["Pic"]
	notes : list[str]
	
	def __init__(self, *, verbose:int, max_issues=3):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._issues = []
		self._max_issues = max_issues
		self.notes = []
	
	def ok(self): return not self._issues
	def sick(self): return bool(self._issues)
	
	def issue(self, it:"Pic"):
		self._issues.append(it)
		if len(self._issues) == self._max_issues:
			raise TooManyIssues(self)
	
	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)
	
	def note(self, text:str):
		self.notes.append(text)
		self.info(text)
	
	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self._issues)
	
	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self._issues:
			self.complain_to_console()
			raise AssertionError(_outburst()+" "+message)
	
	# Methods the interpreter calls:
	
	def step(self, number:int, action):
		self.info("Step %d: %s - %s → %s" % (number, action.op_name, action.actor, action.target))
	
	def unsupported(self, error:UCLError):
		self.note(str(error))
	
	def skipped(self, error:UCLError):
		self.note("Skipped: %s" % error)
	
	def failed(self, error:UCLError):
		intro = "The program stopped with %s." % type(error).__name__
		self.issue(Pic(intro, [], [str(error)]))
	
	# Methods the document reader calls:
	
	def no_such_file(self, path:Path):
		self.issue(Pic("I see no file called "+str(path), []))
	
	def broken_document(self, path:Path, text:str, error:DocumentError):
		intro = "Something went pear-shaped while trying to read "+str(path)
		if error.offset is None:
			problem = []
		else:
			problem = [Annotation(path, text, error.offset, error.detail())]
		footer = [] if problem else [error.detail()]
		self.issue(Pic(intro, problem, footer))

class Annotation:
	def __init__(self, path:Path, text:str, offset:int, caption:str="", width:int=1):
		self.path = path
		self.source = _fetch(text, str(path))
		self.offset = offset
		self.width = width
		self.caption = caption
	def illustrate(self):
		row, col = self.source.find_row_col(self.offset)
		single_line = self.source.line_of_text(row)
		return illustration(single_line, col, self.width, prefix='% 6d |' % row, caption=self.caption)

class Pic:
	def __init__(self, intro:str, anns:list[Annotation], footer=()):
		self._intro, self._anns, self._footer = intro, anns, footer
	def as_text(self):
		lines = [self._intro, ""]
		for ann in self._anns:
			lines.append(ann.illustrate())
		lines.extend(self._footer)
		return '\n'.join(lines)

@lru_cache(5)
def _fetch(text:str, filename:str) -> SourceText:
	return SourceText(text, filename=filename)

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
