'''JSON election file format.

An election file is a JSON object such as::

    {
        "name": "Board election 2024",
        "candidates": [
            {"id": 1, "name": "Alice", "description": "Leader"},
            {"id": 2, "name": "Bob", "active": false}
        ],
        "ballots": {
            "0x1234": [1, 2],
            "0xabcd": [
                {"candidateId": 2, "tiedWithPrevious": false},
                {"candidateId": 1, "tiedWithPrevious": true}
            ]
        }
    }

Ballots are keyed by voter and may use the tagged form (mappings with
``candidateId`` and ``tiedWithPrevious``) or the legacy form (a plain list of
candidate ids without ties). Ballots are always written in the tagged form.

Use :func:`load` and :func:`loads` to read the data and :func:`dump` and
:func:`dumps` to write it.
'''

from __future__ import annotations

import json
from typing import Any, Dict, Hashable, List, Optional

import pairtally.convert
import pairtally.io.core
from pairtally.candidate import Candidate, CandidateError
from pairtally.io.core import ElectionData, ParseError
from pairtally.vote import Ballot, VoteError


class JSONParseError(ParseError):
    pass


def parse(text: str) -> ElectionData:
    '''Parse a JSON election file.

    :param text: Contents of the file.
    :raises JSONParseError: If the contents are not a valid election file.
    '''
    try:
        data = json.loads(text)
    except ValueError as err:
        raise JSONParseError(f'invalid JSON: {err}') from err
    if not isinstance(data, dict):
        raise JSONParseError('election file must contain a JSON object')
    name = data.get('name')
    candidates = _parse_candidates(data.get('candidates', []))
    ballots = _parse_ballots(data.get('ballots', {}))
    return ElectionData(candidates=candidates, ballots=ballots, name=name)


def _parse_candidates(cand_defs: Any) -> List[Candidate]:
    if not isinstance(cand_defs, list):
        raise JSONParseError('candidates must be a list')
    candidates = []
    for cand_def in cand_defs:
        if not isinstance(cand_def, dict) or 'id' not in cand_def:
            raise JSONParseError(f'invalid candidate definition: {cand_def!r}')
        active = cand_def.get('active', True)
        if not isinstance(active, bool):
            raise JSONParseError(
                f'candidate active flag must be a boolean: {cand_def!r}'
            )
        try:
            candidates.append(Candidate(
                cand_def['id'],
                name=cand_def.get('name', ''),
                description=cand_def.get('description', ''),
                active=active,
            ))
        except CandidateError as err:
            raise JSONParseError(str(err)) from err
    return candidates


def _parse_ballots(ballot_defs: Any) -> Dict[Hashable, Ballot]:
    if not isinstance(ballot_defs, dict):
        raise JSONParseError('ballots must be an object keyed by voter')
    converter = pairtally.convert.AnyRankingConverter()
    ballots = {}
    for voter, ranking in ballot_defs.items():
        if not isinstance(ranking, list):
            raise JSONParseError(f'ballot of {voter!r} must be a list')
        try:
            ballots[voter] = converter.convert(ranking)
        except VoteError as err:
            raise JSONParseError(f'ballot of {voter!r}: {err}') from err
    return ballots


def generate(data: ElectionData, indent: Optional[int] = 2) -> str:
    '''Produce the contents of a JSON election file.

    Voter keys are written as strings, so keys that only differ in type
    (such as ``1`` and ``'1'``) cannot be written together.

    :param data: Candidates and ballots to write.
    :param indent: Indentation of the JSON output; None for a single line.
    :raises ValueError: If two voter keys have the same string form.
    '''
    out = {}
    if data.name is not None:
        out['name'] = data.name
    out['candidates'] = [
        {
            'id': cand.id,
            'name': cand.name,
            'description': cand.description,
            'active': cand.active,
        }
        for cand in data.candidates
    ]
    out['ballots'] = {}
    for voter, ballot in data.ballots.items():
        key = str(voter)
        if key in out['ballots']:
            raise ValueError(f'voter keys collide when written: {voter!r}')
        out['ballots'][key] = pairtally.convert.ballot_to_tagged(ballot)
    return json.dumps(out, indent=indent, ensure_ascii=False)


load, loads = pairtally.io.core.loaders(parse)
dump, dumps = pairtally.io.core.dumpers(generate)
