"""Input handler for reading captured gadget-search output"""
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from gadgetsift.error_handling import ErrorContext, create_error

logger = logging.getLogger(__name__)


class InputHandler:
    """Reads gadget listings from files or stdin"""

    def read_from_file(self, filepath: str) -> Tuple[List[str], dict]:
        """
        Read gadget output from a file.

        Args:
            filepath: Path to a file holding captured ROPgadget output

        Returns:
            Tuple of (lines, stats_dict)

        Raises:
            InputError: If the file doesn't exist or cannot be read
        """
        path = Path(filepath)
        context = ErrorContext(source=filepath)

        if not path.exists():
            raise create_error('file_not_found', context=context, path=filepath)

        if not path.is_file():
            raise create_error('not_a_file', context=context, path=filepath)

        try:
            content = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise create_error('unreadable_file', context=context,
                               original_exception=e, path=filepath) from e

        return self._split(content, source=filepath)

    def read_from_stdin(self, stream: Optional[TextIO] = None) -> Tuple[List[str], dict]:
        """
        Read gadget output from standard input.

        Args:
            stream: Stream to read instead of sys.stdin

        Returns:
            Tuple of (lines, stats_dict)
        """
        stream = stream if stream is not None else sys.stdin
        logger.debug("Reading from stdin...")
        return self._split(stream.read(), source='<stdin>')

    def read(self, target: str) -> Tuple[List[str], dict]:
        """Read from a path, or from stdin when target is '-'"""
        if target == '-':
            return self.read_from_stdin()
        return self.read_from_file(target)

    def _split(self, content: str, source: str) -> Tuple[List[str], dict]:
        lines = content.splitlines()
        stats = {
            'lines': len(lines),
            'bytes': len(content),
            'source': source
        }
        logger.info("Read %d lines from %s", stats['lines'], source)
        return lines, stats
