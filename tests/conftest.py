"""Shared fixtures for GadgetSift tests"""
import pytest

from gadgetsift.parser import parse_gadgets


ROPGADGET_OUTPUT = """\
Gadgets information
============================================================
0x0000000000401016 : pop rdi ; ret
0x000000000040101a : mov eax, 0x1 ; ret
0x0000000000401020 : syscall
0x0000000000401022 : int 0x80
0x0000000000401024 : pop rbp ; retf
0x0000000000401026 : jmp rax
0x0000000000401028 : call qword ptr [rax]

Unique gadgets found: 7
"""


@pytest.fixture
def ropgadget_output():
    return ROPGADGET_OUTPUT


@pytest.fixture
def gadgets():
    return parse_gadgets(ROPGADGET_OUTPUT.splitlines())


@pytest.fixture
def gadget_file(tmp_path):
    path = tmp_path / "gadgets.txt"
    path.write_text(ROPGADGET_OUTPUT, encoding="utf-8")
    return path
