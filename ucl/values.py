"""
The value model: null, boolean, number, string, list, and map.
These are plain Python objects: None, bool, float, str, list, dict.
Numbers are always float once they enter the system; documents may
spell them as integers, so `normalize` fixes that on the way in.

Python considers True == 1, but the value model does not.
"""
import json
from typing import Any, Optional, Union

VALUE = Union[None, bool, float, str, list, dict]

def is_number(v) -> bool:
	return isinstance(v, (int, float)) and not isinstance(v, bool)

def as_number(v) -> Optional[float]:
	return float(v) if is_number(v) else None

def as_integer(v) -> Optional[int]:
	""" A number with integral value, as an int; otherwise None. """
	if is_number(v) and float(v).is_integer():
		return int(v)

def normalize(v:Any) -> VALUE:
	if isinstance(v, bool) or v is None or isinstance(v, str): return v
	if isinstance(v, (int, float)): return float(v)
	if isinstance(v, (list, tuple)): return [normalize(x) for x in v]
	if isinstance(v, dict): return {str(k): normalize(x) for k, x in v.items()}
	raise TypeError("Not a value: %r" % (v,))

def same_value(a:VALUE, b:VALUE) -> bool:
	""" Structural equality. """
	if is_number(a):
		return is_number(b) and float(a) == float(b)
	if isinstance(a, bool) or a is None or isinstance(a, str):
		return type(a) is type(b) and a == b
	if isinstance(a, list):
		return isinstance(b, list) and len(a) == len(b) and all(map(same_value, a, b))
	if isinstance(a, dict):
		return isinstance(b, dict) and a.keys() == b.keys() and all(same_value(a[k], b[k]) for k in a)
	return False

def plain(v:VALUE):
	""" The JSON-friendly form: integral floats become ints. """
	if is_number(v):
		f = float(v)
		return int(f) if f.is_integer() and abs(f) < 2**53 else f
	if isinstance(v, list): return [plain(x) for x in v]
	if isinstance(v, dict): return {k: plain(x) for k, x in v.items()}
	return v

def render(v:VALUE) -> str:
	""" Human-friendly text for a value. """
	if v is None: return "null"
	if isinstance(v, bool): return "true" if v else "false"
	if is_number(v):
		p = plain(v)
		return str(p) if isinstance(p, int) else repr(p)
	if isinstance(v, str): return v
	return json.dumps(plain(v), ensure_ascii=False)
