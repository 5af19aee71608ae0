"""Tests for the gadget data model"""
import dataclasses

import pytest

from gadgetsift.models import Gadget, GadgetType, Instruction


def test_instruction_requires_mnemonic():
    with pytest.raises(ValueError):
        Instruction("", ())


def test_instruction_stores_arguments_as_tuple():
    insn = Instruction("mov", ["eax", "0x1"])
    assert insn.arguments == ("eax", "0x1")
    assert str(insn) == "mov eax, 0x1"


def test_gadget_requires_instructions():
    with pytest.raises(ValueError):
        Gadget(0x401000, ())


def test_gadget_rejects_negative_address():
    with pytest.raises(ValueError):
        Gadget(-1, (Instruction("ret"),))


def test_gadget_is_immutable():
    gadget = Gadget(0x401000, (Instruction("ret"),))
    with pytest.raises(dataclasses.FrozenInstanceError):
        gadget.address = 0


def test_gadget_accessors():
    gadget = Gadget(0x401000, [Instruction("pop", ("rdi",)), Instruction("pop", ("rsi", "r15")),
                               Instruction("ret")])

    assert len(gadget) == 3
    assert gadget.last_instruction == Instruction("ret")
    assert gadget.mnemonics == ("pop", "pop", "ret")
    assert gadget.arguments == ("rdi", "rsi", "r15")
    assert str(gadget) == "0x0000000000401000: pop rdi ; pop rsi, r15 ; ret"


@pytest.mark.parametrize("mnemonic,expected", [
    ("ret", GadgetType.RETURN),
    ("retf", GadgetType.RETURN),
    ("syscall", GadgetType.SYSCALL),
    ("int", GadgetType.SYSCALL),
    ("jmp", GadgetType.JUMP),
    ("call", GadgetType.OTHER),
    ("je", GadgetType.OTHER),
])
def test_gadget_type_from_last_instruction(mnemonic, expected):
    gadget = Gadget(0, (Instruction("nop"), Instruction(mnemonic)))
    assert gadget.gadget_type is expected


def test_only_exact_jmp_is_a_jump():
    assert GadgetType.classify("jmpq") is GadgetType.OTHER
