"""Auto-import builtin tool modules to trigger @register_tool decorators."""
from . import collection
from . import item
from . import wallet
