"""
Gadget filter engine

A filter pass keeps the gadgets that satisfy three independent criteria:

- type: the terminating mnemonic is one of the requested kinds (return,
  syscall, jump). With no kind requested every gadget passes.
- mnemonic: some instruction's mnemonic matches a mnemonic pattern.
- argument: some argument of some instruction matches an argument pattern.

Patterns are regular expressions searched anywhere in the token. Several
patterns for the same criterion are OR-ed together.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from gadgetsift.error_handling import ErrorContext, create_error
from gadgetsift.models import Gadget, is_jump, is_return, is_syscall

logger = logging.getLogger(__name__)

# Mapping keys accepted by FilterSpec.from_mapping
INCLUDE_RETURN = 'includeReturn'
INCLUDE_SYSCALL = 'includeSyscall'
INCLUDE_JUMP = 'includeJump'
MNEMONIC_PATTERN = 'mnemonicPattern'
ARGUMENT_PATTERN = 'argumentPattern'

# Tokens accepted by FilterSpec.from_tokens
FLAG_TOKENS = {
    '--ret': INCLUDE_RETURN,
    '--syscall': INCLUDE_SYSCALL,
    '--jmp': INCLUDE_JUMP,
}
PATTERN_TOKENS = {
    '--instruction=': MNEMONIC_PATTERN,
    '--arg=': ARGUMENT_PATTERN,
}


def compile_pattern(pattern: str, key: str = 'filter') -> re.Pattern:
    """
    Compile a user pattern string, raising InvalidPatternError on bad syntax
    or on a value that is not a string.
    """
    context = ErrorContext(pattern=str(pattern))
    if not isinstance(pattern, str):
        raise create_error('invalid_pattern', context=context, key=key, pattern=pattern)

    try:
        return re.compile(pattern)
    except re.error as e:
        raise create_error(
            'invalid_pattern',
            context=context,
            original_exception=e,
            key=key,
            pattern=pattern,
        ) from e


def _as_pattern_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    # Anything else is a single pattern; compile_pattern rejects non-strings
    return [value]


def _as_flag(spec: Mapping[str, Any], key: str) -> bool:
    value = spec.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise create_error('invalid_flag', key=key, value=value)
    return value


@dataclass(frozen=True)
class FilterSpec:
    """Validated set of filter criteria"""
    include_return: bool = False
    include_syscall: bool = False
    include_jump: bool = False
    mnemonic_patterns: Tuple[re.Pattern, ...] = ()
    argument_patterns: Tuple[re.Pattern, ...] = ()

    @classmethod
    def from_mapping(cls, spec: Optional[Mapping[str, Any]]) -> 'FilterSpec':
        """
        Build a spec from a mapping of filter keys.

        Keys are ``includeReturn``, ``includeSyscall``, ``includeJump``
        (booleans) and ``mnemonicPattern``, ``argumentPattern`` (a pattern
        string, a list of pattern strings, or None).

        Raises:
            UnknownFilterError: on an unrecognised key
            FilterError: if a type flag is not a boolean
            InvalidPatternError: if a pattern is not a string or does not compile
        """
        spec = dict(spec or {})
        known = {INCLUDE_RETURN, INCLUDE_SYSCALL, INCLUDE_JUMP, MNEMONIC_PATTERN, ARGUMENT_PATTERN}
        for key in spec:
            if key not in known:
                raise create_error('unknown_filter', name=key)

        return cls(
            include_return=_as_flag(spec, INCLUDE_RETURN),
            include_syscall=_as_flag(spec, INCLUDE_SYSCALL),
            include_jump=_as_flag(spec, INCLUDE_JUMP),
            mnemonic_patterns=tuple(
                compile_pattern(p, MNEMONIC_PATTERN)
                for p in _as_pattern_list(spec.get(MNEMONIC_PATTERN))
            ),
            argument_patterns=tuple(
                compile_pattern(p, ARGUMENT_PATTERN)
                for p in _as_pattern_list(spec.get(ARGUMENT_PATTERN))
            ),
        )

    @classmethod
    def from_tokens(cls, tokens: Iterable[str]) -> 'FilterSpec':
        """
        Build a spec from front-end tokens such as
        ``['--ret', '--instruction=pop', '--arg=rdi']``.

        Repeated ``--instruction=``/``--arg=`` tokens accumulate and are
        matched with OR semantics.

        Raises:
            UnknownFilterError: on a token of any other shape
            InvalidPatternError: if a pattern does not compile
        """
        mapping = {MNEMONIC_PATTERN: [], ARGUMENT_PATTERN: []}

        for token in tokens:
            if token in FLAG_TOKENS:
                mapping[FLAG_TOKENS[token]] = True
                continue
            for prefix, key in PATTERN_TOKENS.items():
                if token.startswith(prefix):
                    mapping[key].append(token[len(prefix):])
                    break
            else:
                raise create_error('unknown_filter', name=token)

        return cls.from_mapping(mapping)

    @property
    def has_type_filter(self) -> bool:
        return self.include_return or self.include_syscall or self.include_jump

    @property
    def is_empty(self) -> bool:
        """True when no criterion is active and every gadget matches"""
        return not (self.has_type_filter or self.mnemonic_patterns or self.argument_patterns)

    def describe(self) -> str:
        """Short summary of the active criteria, for logs and reports"""
        parts = []
        kinds = [name for name, flag in (('ret', self.include_return),
                                          ('syscall', self.include_syscall),
                                          ('jmp', self.include_jump)) if flag]
        if kinds:
            parts.append(f"type in ({' | '.join(kinds)})")
        if self.mnemonic_patterns:
            parts.append(f"mnemonic ~ {' | '.join(p.pattern for p in self.mnemonic_patterns)}")
        if self.argument_patterns:
            parts.append(f"argument ~ {' | '.join(p.pattern for p in self.argument_patterns)}")
        return ' and '.join(parts) if parts else 'no filter'

    def matches_type(self, gadget: Gadget) -> bool:
        if not self.has_type_filter:
            return True

        last = gadget.last_instruction.mnemonic
        return ((self.include_return and is_return(last))
                or (self.include_syscall and is_syscall(last))
                or (self.include_jump and is_jump(last)))

    def matches_mnemonic(self, gadget: Gadget) -> bool:
        if not self.mnemonic_patterns:
            return True

        return any(
            pattern.search(insn.mnemonic)
            for insn in gadget.instructions
            for pattern in self.mnemonic_patterns
        )

    def matches_argument(self, gadget: Gadget) -> bool:
        if not self.argument_patterns:
            return True

        return any(
            pattern.search(arg)
            for insn in gadget.instructions
            for arg in insn.arguments
            for pattern in self.argument_patterns
        )

    def matches(self, gadget: Gadget) -> bool:
        return (self.matches_type(gadget)
                and self.matches_mnemonic(gadget)
                and self.matches_argument(gadget))


SpecLike = Union[FilterSpec, Mapping[str, Any], None]


def as_filter_spec(spec: SpecLike) -> FilterSpec:
    """Accept a FilterSpec, a mapping of filter keys, or None"""
    if isinstance(spec, FilterSpec):
        return spec
    return FilterSpec.from_mapping(spec)


def filter_gadgets(gadgets: Sequence[Gadget], spec: SpecLike = None) -> List[Gadget]:
    """
    Filter gadgets against a spec.

    Args:
        gadgets: Gadgets to filter; never modified
        spec: FilterSpec, mapping of filter keys, or None for no filtering

    Returns:
        Matching gadgets in their original relative order
    """
    spec = as_filter_spec(spec)

    if spec.is_empty:
        return list(gadgets)

    filtered = [g for g in gadgets if spec.matches(g)]

    logger.debug("Filter %s kept %d of %d gadgets", spec.describe(), len(filtered), len(gadgets))
    return filtered
