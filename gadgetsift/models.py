"""Core data models for GadgetSift"""
import re
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


# Rules applied to the terminating mnemonic of a gadget
RETURN_RE = re.compile(r'retf?')
SYSCALL_RE = re.compile(r'syscall|int')
JUMP_MNEMONIC = 'jmp'


def is_return(mnemonic: str) -> bool:
    return RETURN_RE.search(mnemonic) is not None


def is_syscall(mnemonic: str) -> bool:
    return SYSCALL_RE.search(mnemonic) is not None


def is_jump(mnemonic: str) -> bool:
    return mnemonic == JUMP_MNEMONIC


class GadgetType(Enum):
    """Gadget types, decided by the terminating instruction"""
    RETURN = "return"    # ret, retf
    SYSCALL = "syscall"  # syscall, int 0x80
    JUMP = "jump"        # jmp
    OTHER = "other"      # call, anything else

    @classmethod
    def classify(cls, mnemonic: str) -> 'GadgetType':
        """Classify a terminating mnemonic; first matching rule wins."""
        if is_return(mnemonic):
            return cls.RETURN
        if is_syscall(mnemonic):
            return cls.SYSCALL
        if is_jump(mnemonic):
            return cls.JUMP
        return cls.OTHER


@dataclass(frozen=True)
class Instruction:
    """A single instruction of a gadget"""
    mnemonic: str                    # Instruction name (e.g., "mov", "ret")
    arguments: Tuple[str, ...] = ()  # Trimmed argument tokens, in order

    def __post_init__(self):
        if not self.mnemonic:
            raise ValueError("Instruction mnemonic must not be empty")
        # Accept any sequence but store a tuple
        if not isinstance(self.arguments, tuple):
            object.__setattr__(self, 'arguments', tuple(self.arguments))

    def __str__(self):
        if not self.arguments:
            return self.mnemonic
        return f"{self.mnemonic} {', '.join(self.arguments)}"


@dataclass(frozen=True)
class Gadget:
    """A gadget: an address and the instructions found there, in execution order"""
    address: int
    instructions: Tuple[Instruction, ...]

    def __post_init__(self):
        if not isinstance(self.instructions, tuple):
            object.__setattr__(self, 'instructions', tuple(self.instructions))
        if not self.instructions:
            raise ValueError("Gadget must contain at least one instruction")
        if self.address < 0:
            raise ValueError(f"Gadget address must be unsigned, got {self.address}")

    def __len__(self):
        return len(self.instructions)

    @property
    def last_instruction(self) -> Instruction:
        return self.instructions[-1]

    @property
    def mnemonics(self) -> Tuple[str, ...]:
        return tuple(insn.mnemonic for insn in self.instructions)

    @property
    def arguments(self) -> Tuple[str, ...]:
        """All arguments of all instructions, flattened in order"""
        return tuple(arg for insn in self.instructions for arg in insn.arguments)

    @property
    def gadget_type(self) -> GadgetType:
        return GadgetType.classify(self.last_instruction.mnemonic)

    def __str__(self):
        return f"0x{self.address:016x}: {' ; '.join(str(i) for i in self.instructions)}"
