"""bebopc — commandline front end for the Bebop schema compiler.

Parses compiler flags, locates the project's bebop.json, and resolves which
schemas feed which code generators.
"""

__version__ = "0.1.0"
