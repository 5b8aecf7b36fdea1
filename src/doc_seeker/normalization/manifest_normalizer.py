"""
Search manifest normalization.

A manifest is JavaScript text in which every crate contributes one line of
the form ``searchIndex["name"] = {...};``.  The object literal is nearly
JSON, except that some generator versions shorten ``null`` to a bare ``N``
to save space.  This module extracts those fragments and repairs the token so
the result can be handed to a JSON decoder.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from ..config import get_config
from ..errors import ManifestSyntaxError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestFragment:
    """
    One normalized manifest fragment.

    Attributes:
        label: Crate label taken from the left-hand side (may be empty)
        line_number: 1-based line number in the manifest
        text: JSON text with bare ``N`` tokens replaced by ``null``
    """

    label: str
    line_number: int
    text: str


def fix_null_tokens(text: str) -> str:
    r"""
    Replace the bare ``N`` token with ``null`` outside of string literals.

    Characters inside strings, including an escaped ``N``, are left alone:
    ``[1,N,"is \" N ", "\N"]`` becomes ``[1,null,"is \" N ", "\N"]``.
    """
    in_string = False
    escaped = False
    out = []

    for char in text:
        if char == "N" and not in_string and not escaped:
            out.append("null")
            continue

        if char == '"' and not escaped:
            in_string = not in_string
        elif char == "\\" and not escaped:
            escaped = True
        else:
            escaped = False

        out.append(char)

    return "".join(out)


class ManifestNormalizer:
    """
    Extract and repair the fragments of a search manifest.

    Usage:
        normalizer = ManifestNormalizer()
        for fragment in normalizer.iter_fragments(manifest_text):
            print(fragment.label, fragment.text[:40])
    """

    def __init__(self, line_prefix: Optional[str] = None):
        """
        Initialize normalizer.

        Args:
            line_prefix: Prefix identifying fragment lines (defaults to config)
        """
        if line_prefix is None:
            line_prefix = get_config().manifest.line_prefix
        self.line_prefix = line_prefix

    def iter_fragments(self, text: str) -> Iterator[ManifestFragment]:
        """
        Yield every normalized fragment in manifest order.

        Args:
            text: Full manifest text

        Yields:
            ManifestFragment for each line starting with the prefix

        Raises:
            ManifestSyntaxError: If a fragment line has no ``=``
        """
        # Only "\n" ends a line: descriptions may contain unescaped U+2028 or U+0085
        for line_number, line in enumerate(text.split("\n"), 1):
            line = line.removesuffix("\r")
            if not line.startswith(self.line_prefix):
                continue

            yield ManifestFragment(
                label=self.fragment_label(line),
                line_number=line_number,
                text=self.normalize_line(line, line_number),
            )

    def normalize_line(self, line: str, line_number: int = 0) -> str:
        """
        Normalize a single fragment line into JSON text.

        Args:
            line: Manifest line starting with the prefix
            line_number: Line number for error messages

        Returns:
            Right-hand side of the assignment with null tokens repaired
        """
        eq = line.find("=")
        if eq < 0:
            raise ManifestSyntaxError(
                f"Manifest line {line_number} has no '=': {line[:60]!r}"
            )

        value = line[eq + 1 :].strip()
        if value.endswith(";"):
            value = value[:-1]

        return fix_null_tokens(value)

    def fragment_label(self, line: str) -> str:
        """
        Extract the crate label from ``searchIndex["name"] = ...``.

        Returns an empty string when the line carries no label.
        """
        head = line[len(self.line_prefix) :].split("=", 1)[0]
        return head.strip().strip("[]").strip("\"'")
