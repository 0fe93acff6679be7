"""Token reconstruction for PDF text layers.

Municipal PDF exporters often embed subset fonts that emit each glyph as its
own one-character text fragment. Regex row extraction only works once those
runs are merged back into words:

    ['N','o','n','-','F','a','t','a','l',' ','Shooting',' ','12']
        -> ['Non-Fatal', 'Shooting', '12']
"""

from collections.abc import Iterable, Iterator


def _is_run_fragment(fragment: str) -> bool:
    """True for fragments with at most one visible character."""
    return len(fragment.strip()) <= 1


def merge_fragments(fragments: Iterable[str]) -> Iterator[str]:
    """First pass: collapse single-character runs into merged tokens.

    Whitespace-only fragments join the run as a single space so a later
    split can still separate two words emitted glyph by glyph.
    """
    run: list[str] = []
    for fragment in fragments:
        if _is_run_fragment(fragment):
            run.append(fragment.strip() or " ")
            continue
        if run:
            yield "".join(run)
            run = []
        yield fragment.strip()
    if run:
        yield "".join(run)


def split_tokens(merged: Iterable[str]) -> Iterator[str]:
    """Second pass: re-split merged tokens on internal whitespace."""
    for token in merged:
        yield from token.split()


def tokenize(fragments: Iterable[str]) -> Iterator[str]:
    return split_tokens(merge_fragments(fragments))


class TokenStream:
    """Lazy, restartable token sequence over a fixed list of fragments.

    Each iteration re-runs both passes, so a stream can be scanned more than
    once (e.g. by a primary parse and then by a fallback).
    """

    def __init__(self, fragments: Iterable[str]):
        self._fragments = tuple(fragments)

    def __iter__(self) -> Iterator[str]:
        return tokenize(self._fragments)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def text(self) -> str:
        """Tokens joined by single spaces."""
        return " ".join(self)

    def __repr__(self) -> str:
        return f"TokenStream({len(self._fragments)} fragments)"
