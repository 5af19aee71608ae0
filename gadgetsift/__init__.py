"""
GadgetSift - parse and filter ROP gadget listings.

Turns the text printed by gadget-search tools such as ROPgadget into
structured Gadget records and filters them by ending type, mnemonic and
argument patterns.
"""

from .__version__ import __version__
from .error_handling import (
    GadgetSiftError,
    InputError,
    MalformedGadgetError,
    FilterError,
    InvalidPatternError,
    UnknownFilterError,
)
from .models import Instruction, Gadget, GadgetType
from .parser import GadgetParser, parse_gadget, parse_gadgets, parse_instruction
from .filters import FilterSpec, filter_gadgets
from .formatter import format_gadget, format_gadgets, gadget_statistics
from .gadget_set import GadgetSet

__all__ = [
    '__version__',
    'GadgetSiftError',
    'InputError',
    'MalformedGadgetError',
    'FilterError',
    'InvalidPatternError',
    'UnknownFilterError',
    'Instruction',
    'Gadget',
    'GadgetType',
    'GadgetParser',
    'parse_gadget',
    'parse_gadgets',
    'parse_instruction',
    'FilterSpec',
    'filter_gadgets',
    'format_gadget',
    'format_gadgets',
    'gadget_statistics',
    'GadgetSet',
]
