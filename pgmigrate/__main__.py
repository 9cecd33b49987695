from .cli import root

root(prog_name="pgmigrate")
