from . import create, down, force, to, up, version
