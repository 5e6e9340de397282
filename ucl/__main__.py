"""
Run the UCL command-line tool as `python -m ucl`.
"""
from ucl.cmdline import main

main()
