"""Output formatting for gadget listings"""
from typing import Dict, Iterable, List, Sequence

from gadgetsift.models import Gadget, GadgetType


def format_gadget(gadget: Gadget) -> str:
    """
    Render a gadget as one line.

    ``0x<16-digit hex>: <mnemonic> <arg>, <arg> ; <mnemonic> ...``

    The output parses back to an equal Gadget.
    """
    return str(gadget)


def format_gadgets(gadgets: Iterable[Gadget]) -> List[str]:
    return [format_gadget(g) for g in gadgets]


def gadget_statistics(gadgets: Sequence[Gadget]) -> Dict:
    """
    Get statistics about a gadget collection.

    Returns:
        Dictionary with total count, counts per GadgetType value, average
        instruction count and number of distinct mnemonics
    """
    stats = {
        'total_gadgets': len(gadgets),
        'by_type': {t.value: 0 for t in GadgetType},
        'avg_instructions': 0.0,
        'unique_mnemonics': 0,
    }

    if not gadgets:
        return stats

    mnemonics = set()
    for gadget in gadgets:
        stats['by_type'][gadget.gadget_type.value] += 1
        mnemonics.update(gadget.mnemonics)

    stats['avg_instructions'] = sum(len(g) for g in gadgets) / len(gadgets)
    stats['unique_mnemonics'] = len(mnemonics)

    return stats


def format_statistics(stats: Dict) -> str:
    """Render the dictionary from gadget_statistics as a short report"""
    lines = [
        f"Total gadgets: {stats['total_gadgets']}",
    ]
    for type_name, count in stats['by_type'].items():
        lines.append(f"  {type_name:<8} {count}")
    lines.append(f"Average instructions: {stats['avg_instructions']:.2f}")
    lines.append(f"Unique mnemonics: {stats['unique_mnemonics']}")
    return '\n'.join(lines)
