"""tlsgen decoder generator."""

from .errors import *
from .parser import load as load
from .parser import load_all as load_all
from .parser import parse as parse
from .parser import parse_manifest as parse_manifest
from .reflect import Reflector as Reflector
from .reflect import reflect as reflect
from .reflect import reflect_all as reflect_all
from .schema import *
from .sizes import SizeCalculator as SizeCalculator
from .sizes import SizeInfo as SizeInfo
from .sizes import SizeKind as SizeKind
from .sizes import StructSizeInfo as StructSizeInfo
from .sizes import calculate_sizes as calculate_sizes
from .types import *
