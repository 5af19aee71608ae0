"""Parser for ROPgadget-style gadget listings"""
import logging
import re
from typing import Iterable, List, Optional, Tuple

from gadgetsift.error_handling import ErrorContext, ErrorSeverity, MalformedGadgetError, log_error
from gadgetsift.models import Gadget, Instruction

logger = logging.getLogger(__name__)

ADDRESS_PREFIX_LEN = 2  # "0x"
_HEX_RE = re.compile(r'[0-9a-fA-F]+')
# Separator whitespace plus an optional one-byte marker glyph before the mnemonic
_MARKER_RE = re.compile(r'^\s*[^A-Za-z\s]?')


def parse_instruction(text: str) -> Instruction:
    """
    Parse one instruction text such as `` pop rdi`` or `` mov eax, 0x1``.

    The leading marker is dropped, the first space-separated token becomes the
    mnemonic and the rest is split on commas into trimmed arguments. An
    instruction without arguments gets an empty argument tuple.

    Raises:
        MalformedGadgetError: if no mnemonic is left after the marker
    """
    body = text[_MARKER_RE.match(text).end():]

    tokens = body.split(' ')
    mnemonic = tokens[0]
    if not mnemonic:
        raise MalformedGadgetError(
            "Instruction has no mnemonic",
            context=ErrorContext(line=text)
        )

    argument_text = ' '.join(tokens[1:])
    if argument_text.strip():
        arguments = tuple(arg.strip() for arg in argument_text.split(','))
    else:
        arguments = ()

    return Instruction(mnemonic=mnemonic, arguments=arguments)


def parse_gadget(line: str) -> Gadget:
    """
    Parse one line of gadget output into a Gadget.

    Grammar::

        0x<hex> : <insn> ; <insn> ; ...

    Args:
        line: Single gadget line

    Returns:
        Parsed Gadget

    Raises:
        MalformedGadgetError: if the ':' separator is missing, the address is
            not hexadecimal, or there are no instructions
    """
    context = ErrorContext(line=line)

    address_text, sep, instruction_text = line.partition(':')
    if not sep:
        raise MalformedGadgetError("Missing ':' between address and instructions",
                                   context=context)

    digits = address_text[ADDRESS_PREFIX_LEN:].strip()
    if not _HEX_RE.fullmatch(digits):
        raise MalformedGadgetError(f"Invalid hexadecimal address: {address_text.strip()!r}",
                                   context=context)
    address = int(digits, 16)

    if not instruction_text.strip():
        raise MalformedGadgetError("Gadget has no instructions", context=context)

    try:
        instructions = tuple(parse_instruction(part) for part in instruction_text.split(';'))
    except MalformedGadgetError as e:
        raise MalformedGadgetError(e.message, context=context) from e

    return Gadget(address=address, instructions=instructions)


def is_gadget_line(line: str) -> bool:
    """True for lines that look like gadgets rather than banner/summary text"""
    return line.lstrip().startswith('0x')


class GadgetParser:
    """Parses captured gadget-search output into Gadget records"""

    def __init__(self, skip_malformed: bool = False, source: Optional[str] = None):
        """
        Args:
            skip_malformed: Log and skip unparseable gadget lines instead of raising
            source: Name of the input, used in error context and logs
        """
        self.skip_malformed = skip_malformed
        self.source = source
        # Totals across all parse() calls
        self.parsed_count = 0
        self.skipped: List[Tuple[int, str]] = []

    def parse(self, lines: Iterable[str]) -> Tuple[Gadget, ...]:
        """
        Parse many lines, ignoring blank and non-gadget lines.

        Banner lines such as ``Gadgets information`` or
        ``Unique gadgets found: 42`` are ignored silently.

        Args:
            lines: Raw output lines (trailing newlines allowed)

        Returns:
            Tuple of gadgets in input order

        Raises:
            MalformedGadgetError: on the first bad gadget line, unless
                skip_malformed is set
        """
        gadgets = []
        skipped = 0

        for line_number, raw in enumerate(lines, start=1):
            line = raw.rstrip('\r\n')
            if not is_gadget_line(line):
                if line.strip():
                    logger.debug("Ignoring non-gadget line %d: %r", line_number, line)
                continue

            try:
                gadgets.append(parse_gadget(line.lstrip()))
            except MalformedGadgetError as e:
                e.context.line_number = line_number
                e.context.source = self.source
                if not self.skip_malformed:
                    raise
                e.severity = ErrorSeverity.WARNING
                log_error(e, logger)
                self.skipped.append((line_number, line))
                skipped += 1

        self.parsed_count += len(gadgets)
        logger.info("Parsed %d gadgets (%d skipped)", len(gadgets), skipped)
        return tuple(gadgets)


def parse_gadgets(lines: Iterable[str], skip_malformed: bool = False) -> Tuple[Gadget, ...]:
    """Parse many lines of gadget output; see GadgetParser.parse"""
    return GadgetParser(skip_malformed=skip_malformed).parse(lines)
