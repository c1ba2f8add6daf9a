from . import common, sp3
