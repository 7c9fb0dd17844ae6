
import sys
import os
import io
import json

import pytest

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
import pairtally.__main__

BOARD_PATH = os.path.join(os.path.dirname(__file__), 'io', 'data', 'board.json')


def run(**kwargs):
    with open(BOARD_PATH, encoding='utf8') as infile:
        return pairtally.__main__.main(input_file=infile, **kwargs)


def test_ranking(capsys):
    result = run()
    out = capsys.readouterr().out
    assert result.order == (2, 1, 3)
    assert 'Election: Board election 2024' in out
    assert 'Counted 6 ballots for 4 candidates' in out
    lines = [line.split() for line in out.splitlines()]
    assert ['1', '2', 'Bob', 'Smith'] in lines
    assert ['3', '3', 'Carol', 'Davis'] in lines
    assert 'Winner: 2' in out
    assert 'locked' not in out


def test_show_pairs(capsys):
    run(show_pairs=True)
    out = capsys.readouterr().out
    assert '1 > 3 (3:2, margin 1) locked' in out
    assert '2 > 1 (3:2, margin 1) locked' in out


def test_json(capsys):
    run(as_json=True, system='rankedpairs_winvotes')
    result = json.loads(capsys.readouterr().out)
    assert result['class'] == 'pairtally.evaluate.core.FinalRanking'
    assert result['order'] == {'type': 'tuple', 'value': [2, 1, 3]}
    assert result['winner'] == 2


def test_stdin(capsys, monkeypatch):
    with open(BOARD_PATH, encoding='utf8') as infile:
        monkeypatch.setattr(sys, 'stdin', io.StringIO(infile.read()))
    result = pairtally.__main__.main(use_stdin=True, quiet=True)
    assert result.winner == 2


def test_no_ballots(capsys):
    with pytest.warns(UserWarning):
        result = pairtally.__main__.main(
            input_file=io.StringIO('{"candidates": [{"id": 1}]}')
        )
    assert result is None
    assert capsys.readouterr().out == ''


def test_argparser():
    args = pairtally.__main__.argparser.parse_args(
        ['-I', '-s', 'rankedpairs_pwo', '-p', '-j']
    )
    assert args.use_stdin
    assert args.system == 'rankedpairs_pwo'
    assert args.show_pairs
    assert args.as_json
    assert not args.allow_duplicates
    with pytest.raises(SystemExit):
        pairtally.__main__.argparser.parse_args(['-s', 'schulze'])
