"""
Gadget collections

GadgetSet owns a parsed gadget collection for a session. Filtering always
starts from the full collection it was built from, so applying a new filter
never depends on filters applied before.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from gadgetsift.filters import SpecLike, as_filter_spec, filter_gadgets
from gadgetsift.formatter import format_gadgets, gadget_statistics
from gadgetsift.models import Gadget
from gadgetsift.parser import GadgetParser

logger = logging.getLogger(__name__)


class GadgetSet:
    """An immutable, ordered collection of gadgets"""

    def __init__(self, gadgets: Iterable[Gadget] = (), source: Optional[str] = None):
        """
        Args:
            gadgets: Parsed gadgets, in output order
            source: Where the gadgets came from (file name, "<stdin>")
        """
        self.gadgets: Tuple[Gadget, ...] = tuple(gadgets)
        self.source = source

    @classmethod
    def from_lines(
        cls,
        lines: Iterable[str],
        skip_malformed: bool = False,
        source: Optional[str] = None
    ) -> 'GadgetSet':
        """
        Parse captured gadget-search output.

        Raises:
            MalformedGadgetError: on a bad gadget line unless skip_malformed
        """
        parser = GadgetParser(skip_malformed=skip_malformed, source=source)
        return cls(parser.parse(lines), source=source)

    def filter(self, spec: SpecLike = None) -> 'GadgetSet':
        """Return the gadgets of this set matching spec, as a new set"""
        spec = as_filter_spec(spec)
        matched = filter_gadgets(self.gadgets, spec)
        logger.info("%s: %d of %d gadgets match %s",
                    self.source or 'gadgets', len(matched), len(self.gadgets), spec.describe())
        return GadgetSet(matched, source=self.source)

    def statistics(self) -> Dict:
        return gadget_statistics(self.gadgets)

    def format_lines(self) -> List[str]:
        return format_gadgets(self.gadgets)

    def __iter__(self) -> Iterator[Gadget]:
        return iter(self.gadgets)

    def __len__(self):
        return len(self.gadgets)

    def __getitem__(self, index):
        return self.gadgets[index]

    def __eq__(self, other):
        if not isinstance(other, GadgetSet):
            return NotImplemented
        return self.gadgets == other.gadgets

    def __repr__(self):
        return f"GadgetSet({len(self.gadgets)} gadgets, source={self.source!r})"
