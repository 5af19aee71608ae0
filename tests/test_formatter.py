"""Tests for output formatting and statistics"""
from gadgetsift.formatter import format_gadget, format_gadgets, format_statistics, gadget_statistics
from gadgetsift.models import Gadget, Instruction


def test_format_gadget_pads_address():
    gadget = Gadget(0x401016, (Instruction("pop", ("rdi",)), Instruction("ret")))
    assert format_gadget(gadget) == "0x0000000000401016: pop rdi ; ret"


def test_format_gadget_lowercases_address():
    gadget = Gadget(0xDEADBEEF, (Instruction("mov", ("eax", "0x1")), Instruction("ret")))
    assert format_gadget(gadget) == "0x00000000deadbeef: mov eax, 0x1 ; ret"


def test_format_gadgets(gadgets):
    lines = format_gadgets(gadgets)
    assert lines[0] == "0x0000000000401016: pop rdi ; ret"
    assert lines[-1] == "0x0000000000401028: call qword ptr [rax]"


def test_statistics(gadgets):
    stats = gadget_statistics(gadgets)

    assert stats["total_gadgets"] == 7
    assert stats["by_type"] == {"return": 3, "syscall": 2, "jump": 1, "other": 1}
    assert stats["avg_instructions"] == 10 / 7
    assert stats["unique_mnemonics"] == 8


def test_statistics_empty():
    stats = gadget_statistics(())
    assert stats["total_gadgets"] == 0
    assert stats["avg_instructions"] == 0.0


def test_format_statistics(gadgets):
    report = format_statistics(gadget_statistics(gadgets))
    assert "Total gadgets: 7" in report
    assert "Average instructions: 1.43" in report
