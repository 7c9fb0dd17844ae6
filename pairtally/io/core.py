"""Shared functionality for election file I/O. Internal."""

from __future__ import annotations

import dataclasses
import typing
from typing import Any, Callable, Dict, Hashable, List, Optional, TextIO, Tuple

from pairtally.candidate import Candidate
from pairtally.election import StaticBallotSource
from pairtally.vote import Ballot


class ParseError(Exception):
    """An input that is invalid according to the given format was detected."""
    pass


@dataclasses.dataclass
class ElectionData:
    """A container for data returnable from an election file."""
    candidates: List[Candidate]
    ballots: Dict[Hashable, Ballot]
    name: Optional[str] = None

    def source(self) -> StaticBallotSource:
        """Return a ballot source serving the loaded data."""
        return StaticBallotSource(self.candidates, self.ballots)


def loaders(text_loader: Callable[..., ElectionData]
            ) -> Tuple[Callable[..., ElectionData], Callable[..., ElectionData]]:
    """Create load() and loads() functions from a text parsing function."""
    return_annot = typing.get_type_hints(text_loader).get('return')
    if return_annot is None:
        return_annot = Any

    def load(file: TextIO, **kwargs) -> return_annot:
        return text_loader(file.read(), **kwargs)

    def loads(text: str, **kwargs) -> return_annot:
        return text_loader(text, **kwargs)

    return load, loads


def dumpers(text_dumper: Callable[..., str]
            ) -> Tuple[Callable[..., None], Callable[..., str]]:
    """Create dump() and dumps() functions from a text generating function."""

    def dump(file: TextIO, *args, **kwargs) -> None:
        text = text_dumper(*args, **kwargs)
        file.write(text if text.endswith('\n') else text + '\n')

    def dumps(*args, **kwargs) -> str:
        return text_dumper(*args, **kwargs)

    return dump, dumps
