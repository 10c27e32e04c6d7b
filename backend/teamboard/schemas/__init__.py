"""
Schema module initialization.
Exports all schema classes from submodules for convenient imports.
"""
from .auth import *
from .events import *
from .project import *
from .team import *
from .user import *
