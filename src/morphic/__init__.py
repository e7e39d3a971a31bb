"""
Morphic runtime value introspection and conversion

Wraps python values of unknown type so they can be inspected, converted
to other types with a fixed set of coercion rules, compared with each
other, and traversed as records and slices.
"""

__version__ = "0.1.0"


from ._error import *
from ._type import *
from ._ref import *
from ._time import *
from ._parse import *
from ._value import *
from ._convert import *
from ._ops import *
from ._struct import *
from ._slice import *
from ._sort import *
