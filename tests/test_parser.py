"""Tests for the gadget line parser"""
import logging

import pytest
from hypothesis import given, strategies as st

from gadgetsift.error_handling import MalformedGadgetError
from gadgetsift.formatter import format_gadget
from gadgetsift.models import Gadget, Instruction
from gadgetsift.parser import GadgetParser, parse_gadget, parse_gadgets, parse_instruction


def test_parse_gadget_with_marker_bytes():
    gadget = parse_gadget("0x0000000000401016 : \x5fpop rdi ; \xc3ret")

    assert gadget.address == 0x401016
    assert gadget.instructions == (
        Instruction("pop", ("rdi",)),
        Instruction("ret", ()),
    )


def test_parse_gadget_plain_ropgadget_line():
    gadget = parse_gadget("0x000000000040101a : mov eax, 0x1 ; ret")

    assert gadget.address == 0x40101a
    assert gadget.mnemonics == ("mov", "ret")
    assert gadget.instructions[0].arguments == ("eax", "0x1")


def test_parse_gadget_keeps_colon_inside_instructions():
    gadget = parse_gadget("0x0000000000401000 : mov rax, qword ptr fs:[0x28] ; ret")

    assert gadget.instructions[0].arguments == ("rax", "qword ptr fs:[0x28]")


def test_parse_gadget_address_wider_than_64_bits():
    gadget = parse_gadget("0x1ffffffffffffffff : ret")
    assert gadget.address == 0x1ffffffffffffffff


@pytest.mark.parametrize("line", [
    "0x0000000000401016 pop rdi ; ret",   # no separator
    "0xzz : ret",                          # not hex
    "0x : ret",                            # no digits
    "0x-10 : ret",                         # signed
    "0x0000000000401016 :   ",             # no instructions
    "0x0000000000401016 : pop rdi ;",      # trailing empty instruction
])
def test_parse_gadget_malformed(line):
    with pytest.raises(MalformedGadgetError):
        parse_gadget(line)


def test_malformed_error_carries_line():
    with pytest.raises(MalformedGadgetError) as excinfo:
        parse_gadget("no separator here")
    assert excinfo.value.context.line == "no separator here"


def test_parse_instruction_trims_arguments():
    insn = parse_instruction(" mov  qword ptr [rsp + 8],   rax ")
    # double space after the mnemonic is folded into the argument text
    assert insn == Instruction("mov", ("qword ptr [rsp + 8]", "rax"))


def test_parse_instruction_without_arguments_gives_empty_tuple():
    # An empty argument string is normalized to no arguments rather than ("",)
    assert parse_instruction(" ret").arguments == ()
    assert parse_instruction(" ret ").arguments == ()


def test_parser_skips_banner_lines(ropgadget_output):
    gadgets = parse_gadgets(ropgadget_output.splitlines())

    assert len(gadgets) == 7
    assert [g.address for g in gadgets] == sorted(g.address for g in gadgets)


def test_parser_raises_with_line_number():
    lines = ["Gadgets information", "0x0000000000401016 : pop rdi ; ret", "0xnothex : ret"]

    with pytest.raises(MalformedGadgetError) as excinfo:
        GadgetParser(source="gadgets.txt").parse(lines)

    assert excinfo.value.context.line_number == 3
    assert excinfo.value.context.source == "gadgets.txt"


def test_parser_skip_malformed_records_skipped_lines():
    lines = ["0x0000000000401016 : pop rdi ; ret\n", "0xnothex : ret\n", "0x0000000000401020 : syscall\n"]
    parser = GadgetParser(skip_malformed=True)

    gadgets = parser.parse(lines)

    assert [g.address for g in gadgets] == [0x401016, 0x401020]
    assert parser.skipped == [(2, "0xnothex : ret")]
    assert parser.parsed_count == 2


def test_parser_logs_skipped_lines_as_warnings(caplog):
    parser = GadgetParser(skip_malformed=True, source="gadgets.txt")

    with caplog.at_level(logging.INFO, logger="gadgetsift"):
        parser.parse(["0xnothex : ret"])

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "Line: 1" in warnings[0].getMessage()
    assert "gadgets.txt" in warnings[0].getMessage()


def test_parser_reports_skips_per_call(caplog):
    parser = GadgetParser(skip_malformed=True)
    parser.parse(["0xnothex : ret"])

    with caplog.at_level(logging.INFO, logger="gadgetsift"):
        parser.parse(["0x0000000000401020 : syscall"])

    assert "Parsed 1 gadgets (0 skipped)" in caplog.text
    # totals still accumulate on the parser
    assert parser.parsed_count == 1
    assert len(parser.skipped) == 1


_token = st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789[]+*", min_size=1, max_size=8)
_argument = st.one_of(_token, st.builds(lambda a, b: f"{a} {b}", _token, _token))
_instruction = st.builds(
    Instruction,
    mnemonic=st.text(alphabet="abcdefghijklmnopqrstuvwxyz", min_size=1, max_size=8),
    arguments=st.lists(_argument, max_size=3).map(tuple),
)
_gadget = st.builds(
    Gadget,
    address=st.integers(min_value=0, max_value=2**80),
    instructions=st.lists(_instruction, min_size=1, max_size=5).map(tuple),
)


@given(_gadget)
def test_format_then_parse_is_stable(gadget):
    assert parse_gadget(format_gadget(gadget)) == gadget
